"""Permission context - conditional grant bound to a resource type."""

from dataclasses import dataclass, field
from uuid import UUID

from grantwise.domain.value_objects import ContextCondition


@dataclass
class PermissionContext:
    """Grants ``permissions`` on instances of ``resource_type`` that satisfy ``condition``."""

    id: UUID
    name: str
    resource_type: str
    condition: ContextCondition
    permissions: frozenset[UUID] = field(default_factory=frozenset)
    display_name: str = ""
    description: str = ""
    is_active: bool = True
