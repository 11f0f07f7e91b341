"""Create permission context use case."""

import logging
from collections.abc import Iterable
from typing import Any
from uuid import UUID, uuid4

from grantwise.application.ports import AuditEvent, AuditSink
from grantwise.domain.entities import PermissionContext
from grantwise.domain.exceptions import ValidationError
from grantwise.domain.value_objects import ContextCondition

logger = logging.getLogger(__name__)


class CreateContextUseCase:
    """Create a permission context. The condition is validated here, at write time."""

    def __init__(self, unit_of_work_factory: type, audit_sink: AuditSink) -> None:
        self._uow_factory = unit_of_work_factory
        self._audit = audit_sink

    async def execute(
        self,
        name: str,
        resource_type: str,
        condition: ContextCondition | dict[str, Any],
        permission_ids: Iterable[UUID],
        *,
        display_name: str = "",
        description: str = "",
        created_by: str | None = None,
    ) -> PermissionContext:
        if not name or not resource_type:
            raise ValidationError("Context name and resource type are required")
        if isinstance(condition, dict):
            condition = ContextCondition.from_dict(condition)
        permissions = frozenset(permission_ids)
        if not permissions:
            raise ValidationError("A permission context must grant at least one permission")

        async with self._uow_factory() as uow:
            found = await uow.permissions.get_many(permissions)
            missing = [pid for pid in permissions if pid not in found]
            if missing:
                raise ValidationError(
                    "Unknown permissions: " + ", ".join(sorted(str(p) for p in missing))
                )
            context = PermissionContext(
                id=uuid4(),
                name=name,
                display_name=display_name or name,
                description=description,
                resource_type=resource_type,
                condition=condition,
                permissions=permissions,
            )
            await uow.contexts.create(context)

        self._audit.record(
            AuditEvent(
                actor=created_by,
                action="context_created",
                target=str(context.id),
                metadata={"context_name": name, "condition": condition.to_dict()},
            )
        )
        logger.info("Created permission context %s for %s", name, resource_type)
        return context
