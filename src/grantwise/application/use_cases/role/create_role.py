"""Create role use case."""

import logging
from collections.abc import Iterable
from uuid import UUID, uuid4

from grantwise.application.ports import AuditEvent, AuditSink
from grantwise.domain.entities import Role, RoleRestrictions
from grantwise.domain.exceptions import Conflict, ValidationError

logger = logging.getLogger(__name__)


class CreateRoleUseCase:
    """Create a custom (non-system) role."""

    def __init__(self, unit_of_work_factory: type, audit_sink: AuditSink) -> None:
        self._uow_factory = unit_of_work_factory
        self._audit = audit_sink

    async def execute(
        self,
        name: str,
        display_name: str,
        permission_ids: Iterable[UUID] = (),
        *,
        description: str = "",
        priority: int = 100,
        restrictions: RoleRestrictions | None = None,
        created_by: str | None = None,
    ) -> Role:
        name = (name or "").strip().lower()
        if not name:
            raise ValidationError("Role name is required")
        permissions = frozenset(permission_ids)

        async with self._uow_factory() as uow:
            if await uow.roles.get_by_name(name):
                raise Conflict(f"Role {name} already exists")
            found = await uow.permissions.get_many(permissions)
            if any(pid not in found or not found[pid].is_active for pid in permissions):
                raise ValidationError("Some permissions are invalid or inactive")

            role = Role(
                id=uuid4(),
                name=name,
                display_name=display_name or name,
                description=description,
                permissions=permissions,
                priority=priority,
                is_system=False,
                restrictions=restrictions or RoleRestrictions(),
            )
            await uow.roles.create(role)

        self._audit.record(
            AuditEvent(
                actor=created_by,
                action="role_created",
                target=str(role.id),
                metadata={"role_name": role.name},
            )
        )
        logger.info("Created role %s", role.name)
        return role
