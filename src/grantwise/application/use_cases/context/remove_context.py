"""Remove permission context use case."""

import logging
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


class RemoveContextUseCase:
    """Remove an assigned permission context from a user."""

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
        context_id: UUID,
        removed_by: str | None = None,
    ) -> None:
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            if context_id not in state.contexts:
                raise NotFound("Context assignment", f"{user_id}/{context_id}")
            del state.contexts[context_id]
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=removed_by,
                action="context_removed",
                target=user_id,
                metadata={"context_id": str(context_id)},
            )
        )
        logger.info("Removed context %s from user %s", context_id, user_id)
