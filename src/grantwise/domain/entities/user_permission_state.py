"""Per-user permission state: role, custom grants/denials, temporary grants,
assigned contexts and resource-instance overrides."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class TemporaryGrant:
    """Time-bounded grant of one permission."""

    permission_id: UUID
    expires_at: datetime
    granted_at: datetime
    granted_by: str | None = None
    reason: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass
class ContextAssignment:
    """Permission context assigned to a user."""

    context_id: UUID
    assigned_at: datetime
    assigned_by: str | None = None
    is_active: bool = True


@dataclass
class ResourceOverride:
    """Instance-level grants and denials for one ``(resource_type, resource_id)``."""

    resource_type: str
    resource_id: str
    assigned_at: datetime
    granted: frozenset[UUID] = field(default_factory=frozenset)
    denied: frozenset[UUID] = field(default_factory=frozenset)
    expires_at: datetime | None = None
    assigned_by: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.resource_type, self.resource_id)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


@dataclass
class UserPermissionState:
    """Aggregated permission state of one user.

    Temporary grants, contexts and overrides are maps keyed by their natural
    key so that re-granting or re-assigning replaces the previous entry.
    """

    user_id: str
    role_id: UUID | None = None
    custom_granted: set[UUID] = field(default_factory=set)
    custom_denied: set[UUID] = field(default_factory=set)
    temporary_grants: dict[UUID, TemporaryGrant] = field(default_factory=dict)
    contexts: dict[UUID, ContextAssignment] = field(default_factory=dict)
    resource_overrides: dict[tuple[str, str], ResourceOverride] = field(
        default_factory=dict
    )
    last_updated: datetime = field(default_factory=_utcnow)

    def touch(self, now: datetime | None = None) -> None:
        """Bump ``last_updated``; called by every mutation."""
        self.last_updated = now or _utcnow()

    def live_temporary_grants(self, now: datetime) -> list[TemporaryGrant]:
        return [g for g in self.temporary_grants.values() if not g.is_expired(now)]

    def active_context_ids(self) -> list[UUID]:
        return [c.context_id for c in self.contexts.values() if c.is_active]

    def active_override(
        self, resource_type: str, resource_id: str, now: datetime
    ) -> ResourceOverride | None:
        override = self.resource_overrides.get((resource_type, resource_id))
        if override is None or override.is_expired(now):
            return None
        return override

    def upsert_temporary_grant(self, grant: TemporaryGrant) -> None:
        self.temporary_grants[grant.permission_id] = grant

    def upsert_override(self, override: ResourceOverride) -> None:
        self.resource_overrides[override.key] = override

    def remove_expired(self, now: datetime) -> tuple[int, int]:
        """Drop expired temporary grants and overrides. Returns removed counts."""
        expired_grants = [
            pid for pid, g in self.temporary_grants.items() if g.is_expired(now)
        ]
        for pid in expired_grants:
            del self.temporary_grants[pid]
        expired_overrides = [
            key for key, o in self.resource_overrides.items() if o.is_expired(now)
        ]
        for key in expired_overrides:
            del self.resource_overrides[key]
        return len(expired_grants), len(expired_overrides)
