"""Effective permissions read model."""

from dataclasses import dataclass, field

from grantwise.domain.entities import Permission
from grantwise.domain.value_objects import SourceTag


@dataclass
class EffectivePermission:
    """Permission held by a user with every source that grants it."""

    permission: Permission
    sources: list[SourceTag] = field(default_factory=list)


@dataclass
class EffectivePermissions:
    """User's effective permissions and explicit denials."""

    user_id: str
    permissions: list[EffectivePermission]
    denied_permissions: list[Permission]
    is_superadmin: bool = False
