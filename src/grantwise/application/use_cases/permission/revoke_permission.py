"""Revoke permission use case."""

import logging
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


class RevokePermissionUseCase:
    """Revoke a permanent or temporary grant from a user."""

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
        permission_id: UUID,
        revoked_by: str | None = None,
    ) -> None:
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            had_custom = permission_id in state.custom_granted
            had_temporary = permission_id in state.temporary_grants
            if not had_custom and not had_temporary:
                raise NotFound("Grant", f"{user_id}/{permission_id}")
            state.custom_granted.discard(permission_id)
            state.temporary_grants.pop(permission_id, None)
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=revoked_by,
                action="permission_revoked",
                target=user_id,
                metadata={
                    "permission_id": str(permission_id),
                    "custom": had_custom,
                    "temporary": had_temporary,
                },
            )
        )
        logger.info("Revoked permission %s from user %s", permission_id, user_id)
