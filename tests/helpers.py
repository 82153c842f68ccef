# tests/helpers.py

from typing import Dict

from taskflow.models import Role
from taskflow.utils.security import create_access_token


def auth_headers(user_id: int, role: Role) -> Dict[str, str]:
    token = create_access_token({"id": user_id, "role": role.value})
    return {"Authorization": f"Bearer {token}"}
