# taskflow/utils/permissions.py
import enum
from typing import Dict, FrozenSet, Tuple

from taskflow.models.user import Role


class Permission(str, enum.Enum):
    LIST_USERS = "users:list"
    LIST_EMPLOYEES = "users:list_employees"
    DELETE_USER = "users:delete"
    CHANGE_ROLE = "users:change_role"
    CREATE_TASK = "tasks:create"
    VIEW_ALL_TASKS = "tasks:view_all"
    UPDATE_TASK = "tasks:update"
    UPDATE_ANY_TASK_STATUS = "tasks:update_any_status"
    DELETE_TASK = "tasks:delete"
    DELETE_ATTACHMENT = "attachments:delete"


_MANAGER_PERMISSIONS = frozenset({
    Permission.LIST_EMPLOYEES,
    Permission.CREATE_TASK,
    Permission.VIEW_ALL_TASKS,
    Permission.UPDATE_TASK,
    Permission.UPDATE_ANY_TASK_STATUS,
    Permission.DELETE_TASK,
    Permission.DELETE_ATTACHMENT,
})

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: _MANAGER_PERMISSIONS | {
        Permission.LIST_USERS,
        Permission.DELETE_USER,
        Permission.CHANGE_ROLE,
    },
    Role.MANAGER: _MANAGER_PERMISSIONS,
    # Employees only act on tasks assigned to them
    Role.EMPLOYEE: frozenset(),
}


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def roles_with(permission: Permission) -> Tuple[Role, ...]:
    """Roles granted ``permission``, in declaration order"""
    return tuple(role for role in Role if has_permission(role, permission))
