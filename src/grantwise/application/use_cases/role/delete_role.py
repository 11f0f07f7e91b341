"""Delete role use case."""

import logging
from uuid import UUID

from grantwise.application.ports import AuditEvent, AuditSink
from grantwise.domain.exceptions import Conflict, NotFound, PolicyViolation

logger = logging.getLogger(__name__)


class DeleteRoleUseCase:
    """Delete a custom role that no user holds."""

    def __init__(self, unit_of_work_factory: type, audit_sink: AuditSink) -> None:
        self._uow_factory = unit_of_work_factory
        self._audit = audit_sink

    async def execute(self, role_id: UUID, deleted_by: str | None = None) -> None:
        async with self._uow_factory() as uow:
            role = await uow.roles.get_for_update(role_id)
            if role is None:
                raise NotFound("Role", role_id)
            if role.is_system:
                raise PolicyViolation(f"Cannot delete system role {role.name}")
            holders = await uow.users.count_by_role(role_id)
            if holders > 0:
                raise Conflict(f"Cannot delete role {role.name}: {holders} users have it assigned")
            await uow.roles.delete(role_id)

        self._audit.record(
            AuditEvent(
                actor=deleted_by,
                action="role_deleted",
                target=str(role_id),
                metadata={"role_name": role.name},
            )
        )
        logger.info("Deleted role %s", role.name)
