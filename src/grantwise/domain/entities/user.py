"""User entity - identity record read by the engine."""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass
class User:
    """Identity store record. ``attributes`` holds custom fields such as ``customerId``."""

    id: str
    is_active: bool = True
    role_id: UUID | None = None
    mfa_enabled: bool = False
    email: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
