# taskflow/utils/auth.py
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from taskflow.models.user import Role
from taskflow.utils.errors import ForbiddenError, UnauthorizedError
from taskflow.utils.permissions import Permission, roles_with
from taskflow.utils.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through UnauthorizedError like any other bad token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login", auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The decoded {id, role} of the caller"""

    id: int
    role: Role


def identity_from_token(token: str) -> Identity:
    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")

    try:
        return Identity(id=int(payload["id"]), role=Role(payload["role"]))
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload")


def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    if not token:
        raise UnauthorizedError("Not authenticated")
    return identity_from_token(token)


def restrict_to(*roles: Role) -> Callable[..., Identity]:
    """Dependency factory rejecting callers whose role is not in ``roles``"""
    allowed = frozenset(roles)

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            logger.warning(
                "Denied %s (user %s): requires one of %s",
                identity.role.value, identity.id, ", ".join(sorted(r.value for r in allowed)),
            )
            raise ForbiddenError("You do not have permission to perform this action")
        return identity

    return dependency


def require_permission(permission: Permission) -> Callable[..., Identity]:
    return restrict_to(*roles_with(permission))
