"""Role entity for RBAC."""

from dataclasses import dataclass, field
from uuid import UUID

SUPERADMIN_ROLE = "superadmin"


@dataclass
class RoleRestrictions:
    """Policy applied when a role is assigned. ``max_users == 0`` means unlimited."""

    max_users: int = 0
    requires_mfa: bool = False
    requires_approval: bool = False


@dataclass
class Role:
    """Role - named, prioritized bundle of permission ids."""

    id: UUID
    name: str
    display_name: str
    description: str = ""
    permissions: frozenset[UUID] = field(default_factory=frozenset)
    priority: int = 100
    is_active: bool = True
    is_system: bool = False
    is_default: bool = False
    restrictions: RoleRestrictions = field(default_factory=RoleRestrictions)

    @property
    def is_superadmin(self) -> bool:
        return self.name == SUPERADMIN_ROLE
