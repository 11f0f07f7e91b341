"""Assign permission context use case."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.entities import ContextAssignment
from grantwise.domain.exceptions import Inactive, NotFound

logger = logging.getLogger(__name__)


class AssignContextUseCase:
    """Assign a permission context to a user (upsert by context id)."""

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
        assigned_by: str | None = None,
    ) -> ContextAssignment:
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            context = await uow.contexts.get_by_id(context_id)
            if context is None:
                raise NotFound("Permission context", context_id)
            if not context.is_active:
                raise Inactive("Permission context", context.name)

            assignment = ContextAssignment(
                context_id=context_id,
                assigned_at=now,
                assigned_by=assigned_by,
                is_active=True,
            )
            state.contexts[context_id] = assignment
            state.touch(now)
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=assigned_by,
                action="context_assigned",
                target=user_id,
                metadata={"context_id": str(context_id), "context_name": context.name},
            )
        )
        logger.info("Assigned context %s to user %s", context.name, user_id)
        return assignment
