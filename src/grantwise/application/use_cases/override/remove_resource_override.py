"""Remove resource override use case."""

import logging

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


class RemoveResourceOverrideUseCase:
    """Remove the override a user has on one resource instance."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        audit_sink: AuditSink,
        invalidation_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._audit = audit_sink
        self._attempts = invalidation_attempts

    async def execute(
        self,
        user_id: str,
        resource_type: str,
        resource_id: str,
        removed_by: str | None = None,
    ) -> None:
        key = (resource_type, str(resource_id))
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            if key not in state.resource_overrides:
                raise NotFound("Resource override", f"{user_id}/{resource_type}:{resource_id}")
            del state.resource_overrides[key]
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=removed_by,
                action="resource_override_removed",
                target=user_id,
                metadata={"resource_type": resource_type, "resource_id": str(resource_id)},
            )
        )
        logger.info(
            "Removed resource override for user %s on %s:%s", user_id, resource_type, resource_id
        )
