"""Deny / remove-denial use cases - manage a user's permanent denials."""

import logging
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.exceptions import Conflict, NotFound

logger = logging.getLogger(__name__)


class DenyPermissionUseCase:
    """Add a permission to the user's permanent denials."""

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
        denied_by: str | None = None,
    ) -> None:
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            permission = await uow.permissions.get_by_id(permission_id)
            if permission is None:
                raise NotFound("Permission", permission_id)
            if permission_id in state.custom_denied:
                raise Conflict(f"Permission {permission.name} is already denied for {user_id}")
            state.custom_denied.add(permission_id)
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=denied_by,
                action="permission_denied",
                target=user_id,
                metadata={"permission_id": str(permission_id), "permission_name": permission.name},
            )
        )
        logger.info("Denied permission %s for user %s", permission.name, user_id)


class RemoveDenialUseCase:
    """Remove a permission from the user's permanent denials."""

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
        removed_by: str | None = None,
    ) -> None:
        async with self._uow_factory() as uow:
            _, state = await load_user_state(uow, user_id)
            if permission_id not in state.custom_denied:
                raise NotFound("Denial", f"{user_id}/{permission_id}")
            state.custom_denied.discard(permission_id)
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=removed_by,
                action="permission_denial_removed",
                target=user_id,
                metadata={"permission_id": str(permission_id)},
            )
        )
        logger.info("Removed denial of %s for user %s", permission_id, user_id)
