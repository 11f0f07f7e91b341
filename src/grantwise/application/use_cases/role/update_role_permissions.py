"""Update role permissions use case."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_role_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.domain.entities import Role
from grantwise.domain.exceptions import NotFound, PolicyViolation, ValidationError

logger = logging.getLogger(__name__)


class UpdateRolePermissionsUseCase:
    """Replace a custom role's permission set and invalidate every holder."""

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
        role_id: UUID,
        permission_ids: Iterable[UUID],
        modified_by: str | None = None,
    ) -> Role:
        new_set = frozenset(permission_ids)
        async with self._uow_factory() as uow:
            role = await uow.roles.get_for_update(role_id)
            if role is None:
                raise NotFound("Role", role_id)
            if role.is_system:
                raise PolicyViolation(f"Cannot modify system role {role.name}")

            found = await uow.permissions.get_many(new_set)
            invalid = [pid for pid in new_set if pid not in found or not found[pid].is_active]
            if invalid:
                raise ValidationError(
                    "Some permissions are invalid or inactive: "
                    + ", ".join(sorted(str(pid) for pid in invalid))
                )

            previous = role.permissions
            updated = replace(role, permissions=new_set)
            await uow.roles.update(updated)

        await invalidate_role_or_fail(self._cache, role_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=modified_by,
                action="role_permissions_updated",
                target=str(role_id),
                metadata={
                    "role_name": role.name,
                    "added": sorted(str(p) for p in new_set - previous),
                    "removed": sorted(str(p) for p in previous - new_set),
                },
            )
        )
        logger.info("Updated permissions of role %s (%d permissions)", role.name, len(new_set))
        return updated
