from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from taskflow.models.user import Role

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Role = Role.EMPLOYEE

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class RoleUpdate(BaseModel):
    role: Role

class UserBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = {
        "from_attributes": True
    }

class UserSummary(UserBrief):
    role: Role

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    model_config = {
        "from_attributes": True
    }

class RegisterOut(BaseModel):
    message: str
    user_id: int = Field(..., serialization_alias="userId")

class MessageOut(BaseModel):
    message: str
