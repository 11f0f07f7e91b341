"""Domain entities."""

from grantwise.domain.entities.permission import Permission
from grantwise.domain.entities.permission_context import PermissionContext
from grantwise.domain.entities.role import SUPERADMIN_ROLE, Role, RoleRestrictions
from grantwise.domain.entities.user import User
from grantwise.domain.entities.user_permission_state import (
    ContextAssignment,
    ResourceOverride,
    TemporaryGrant,
    UserPermissionState,
)

__all__ = [
    "ContextAssignment",
    "Permission",
    "PermissionContext",
    "ResourceOverride",
    "Role",
    "RoleRestrictions",
    "SUPERADMIN_ROLE",
    "TemporaryGrant",
    "User",
    "UserPermissionState",
]
