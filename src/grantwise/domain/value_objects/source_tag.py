"""Source tags - where an effective permission came from."""

from dataclasses import dataclass
from enum import StrEnum


class SourceKind(StrEnum):
    """Kinds of permission sources."""

    ROLE = "role"
    CUSTOM = "custom"
    TEMPORARY = "temporary"
    CONTEXT = "context"
    OVERRIDE = "override"
    SUPERADMIN = "superadmin"


@dataclass(frozen=True)
class SourceTag:
    """One contributing source of a decision or effective permission."""

    kind: SourceKind
    name: str | None = None

    def __str__(self) -> str:
        if self.kind == SourceKind.ROLE:
            return self.name or SourceKind.ROLE.value
        if self.kind in (SourceKind.TEMPORARY, SourceKind.CONTEXT):
            return f"{self.kind.value}:{self.name or ''}"
        return self.kind.value
