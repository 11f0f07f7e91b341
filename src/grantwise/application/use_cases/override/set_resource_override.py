"""Set resource override use case."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache, ResourceStore
from grantwise.application.user_state import load_user_state
from grantwise.domain.entities import ResourceOverride
from grantwise.domain.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)


class SetResourceOverrideUseCase:
    """Set instance-level grants/denials for one resource (upsert by type and id)."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        audit_sink: AuditSink,
        resource_store: ResourceStore,
        invalidation_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._audit = audit_sink
        self._resource_store = resource_store
        self._attempts = invalidation_attempts

    async def execute(
        self,
        user_id: str,
        resource_type: str,
        resource_id: str,
        granted: Iterable[UUID] = (),
        denied: Iterable[UUID] = (),
        *,
        expires_at: datetime | None = None,
        expires_in: timedelta | None = None,
        assigned_by: str | None = None,
    ) -> ResourceOverride:
        """Set override. ResourceFetchTimeout from the resource store aborts with no change."""
        granted_set = frozenset(granted)
        denied_set = frozenset(denied)
        if not granted_set and not denied_set:
            raise ValidationError("No permissions specified")
        resource_id = str(resource_id)

        resource = await self._resource_store.fetch(resource_type, resource_id)
        if resource is None:
            raise NotFound(resource_type.capitalize(), resource_id)

        now = datetime.now(UTC)
        if expires_at is None and expires_in is not None:
            expires_at = now + expires_in

        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            found = await uow.permissions.get_many(granted_set | denied_set)
            missing = [pid for pid in granted_set | denied_set if pid not in found]
            if missing:
                raise NotFound("Permission", ", ".join(sorted(str(p) for p in missing)))

            override = ResourceOverride(
                resource_type=resource_type,
                resource_id=resource_id,
                granted=granted_set,
                denied=denied_set,
                expires_at=expires_at,
                assigned_at=now,
                assigned_by=assigned_by,
            )
            state.upsert_override(override)
            state.touch(now)
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=assigned_by,
                action="resource_override_set",
                target=user_id,
                metadata={
                    "resource_type": resource_type,
                    "resource_id": resource_id,
                    "granted": sorted(str(p) for p in granted_set),
                    "denied": sorted(str(p) for p in denied_set),
                    "expires_at": expires_at.isoformat() if expires_at else None,
                },
            )
        )
        logger.info(
            "Set resource override for user %s on %s:%s", user_id, resource_type, resource_id
        )
        return override
