"""Activate or deactivate a catalog permission."""

import logging
from dataclasses import replace
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, clear_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.domain.entities import Permission
from grantwise.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


class SetPermissionActiveUseCase:
    """Toggle ``is_active`` on a permission.

    Grant records are kept; an inactive permission is ignored by every
    evaluation, so the whole decision cache is dropped.
    """

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
        permission_id: UUID,
        is_active: bool,
        modified_by: str | None = None,
    ) -> Permission:
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get_by_id(permission_id)
            if permission is None:
                raise NotFound("Permission", permission_id)
            if permission.is_active == is_active:
                return permission
            permission = replace(permission, is_active=is_active)
            await uow.permissions.update(permission)

        await clear_or_fail(self._cache, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=modified_by,
                action="permission_activated" if is_active else "permission_deactivated",
                target=str(permission_id),
                metadata={"permission_name": permission.name},
            )
        )
        logger.info(
            "Permission %s %s", permission.name, "activated" if is_active else "deactivated"
        )
        return permission
