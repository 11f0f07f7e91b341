"""Repository ports."""

from grantwise.application.ports.repositories.context_repository import ContextRepository
from grantwise.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from grantwise.application.ports.repositories.permission_state_repository import (
    PermissionStateRepository,
)
from grantwise.application.ports.repositories.role_repository import RoleRepository
from grantwise.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "ContextRepository",
    "PermissionRepository",
    "PermissionStateRepository",
    "RoleRepository",
    "UserRepository",
]
