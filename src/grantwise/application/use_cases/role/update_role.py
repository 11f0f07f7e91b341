"""Update role use case."""

import logging
from dataclasses import replace
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_role_or_fail
from grantwise.application.dto import RoleUpdate
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.domain.entities import Role
from grantwise.domain.exceptions import NotFound, PolicyViolation, ValidationError

logger = logging.getLogger(__name__)

_RESTRICTION_FIELDS = ("max_users", "requires_mfa", "requires_approval")


class UpdateRoleUseCase:
    """Change a custom role's attributes and restrictions.

    Deactivating a role makes every holder resolve as if they had no role, so
    the cache of all holders is dropped after commit. Restrictions only apply to
    future assignments; current holders keep the role even above ``max_users``.
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
        role_id: UUID,
        update: RoleUpdate,
        modified_by: str | None = None,
    ) -> Role:
        changes = update.changes()
        if not changes:
            raise ValidationError("No role fields to update")
        if "display_name" in changes and not changes["display_name"].strip():
            raise ValidationError("display_name must not be blank")
        if changes.get("max_users", 0) < 0:
            raise ValidationError("max_users must be 0 (unlimited) or positive")

        async with self._uow_factory() as uow:
            role = await uow.roles.get_for_update(role_id)
            if role is None:
                raise NotFound("Role", role_id)
            if role.is_system:
                raise PolicyViolation(f"Cannot modify system role {role.name}")

            restriction_changes = {k: v for k, v in changes.items() if k in _RESTRICTION_FIELDS}
            role_changes = {k: v for k, v in changes.items() if k not in _RESTRICTION_FIELDS}
            if "display_name" in role_changes:
                role_changes["display_name"] = role_changes["display_name"].strip()
            updated = replace(
                role,
                **role_changes,
                restrictions=replace(role.restrictions, **restriction_changes),
            )
            await uow.roles.update(updated)

        await invalidate_role_or_fail(self._cache, role_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=modified_by,
                action="role_updated",
                target=str(role_id),
                metadata={
                    "role_name": role.name,
                    "changes": changes,
                    "previous": {name: _field(role, name) for name in changes},
                },
            )
        )
        logger.info("Updated role %s (%s)", role.name, ", ".join(sorted(changes)))
        return updated


def _field(role: Role, name: str) -> object:
    if name in _RESTRICTION_FIELDS:
        return getattr(role.restrictions, name)
    return getattr(role, name)
