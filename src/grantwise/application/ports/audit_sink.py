"""Audit sink port - fire-and-forget audit records."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol


@dataclass(frozen=True)
class AuditEvent:
    """Audit record of an administrative action."""

    actor: str | None
    action: str
    target: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class AuditSink(Protocol):
    """Port for recording audit events. Must not block the caller."""

    def record(self, event: AuditEvent) -> None: ...
