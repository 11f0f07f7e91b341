"""Permission entity - catalog entry ``<resource>:<action>[:<qualifier>]``."""

from dataclasses import dataclass, field
from uuid import UUID

from grantwise.domain.value_objects import PermissionCategory


@dataclass
class Permission:
    """Permission - globally unique name, grouped by category."""

    id: UUID
    name: str
    description: str
    category: PermissionCategory
    resource: str
    actions: frozenset[str] = field(default_factory=frozenset)
    is_active: bool = True
    requires_mfa: bool = False
