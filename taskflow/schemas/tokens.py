# taskflow/schemas/tokens.py
from pydantic import BaseModel

from taskflow.models.user import Role

class LoginUser(BaseModel):
    """Profile returned on login; never carries the password hash"""
    name: str
    email: str
    role: Role

    model_config = {
        "from_attributes": True
    }

class Token(BaseModel):
    message: str
    token: str
    user: LoginUser
