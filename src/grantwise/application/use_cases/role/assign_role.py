"""Assign role use case."""

import logging
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.dto import AssignmentStatus, RoleAssignmentResult
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.exceptions import Inactive, NotFound, PolicyViolation

logger = logging.getLogger(__name__)


class AssignRoleUseCase:
    """Assign a role to a user, enforcing the role's restrictions."""

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
        role_id: UUID,
        assigned_by: str | None = None,
    ) -> RoleAssignmentResult:
        """Assign role. Roles requiring approval return a pending result without applying."""
        async with self._uow_factory() as uow:
            user, state = await load_user_state(uow, user_id)
            role = await uow.roles.get_for_update(role_id)
            if role is None:
                raise NotFound("Role", role_id)
            if not role.is_active:
                raise Inactive("Role", role.name)

            previous_role_id = state.role_id
            if role.restrictions.requires_approval:
                self._audit.record(
                    AuditEvent(
                        actor=assigned_by,
                        action="role_assignment_requested",
                        target=user_id,
                        metadata={"role_id": str(role_id), "role_name": role.name},
                    )
                )
                logger.info("Role %s for user %s is pending approval", role.name, user_id)
                return RoleAssignmentResult(
                    user_id=user_id,
                    role_id=role_id,
                    status=AssignmentStatus.PENDING_APPROVAL,
                    previous_role_id=previous_role_id,
                )

            if role.restrictions.max_users > 0 and previous_role_id != role_id:
                holders = await uow.users.count_by_role(role_id)
                if holders >= role.restrictions.max_users:
                    raise PolicyViolation(f"Maximum users for role {role.name} reached")

            if role.restrictions.requires_mfa and not user.mfa_enabled:
                raise PolicyViolation(f"MFA must be enabled for role {role.name}")

            state.role_id = role_id
            state.touch()
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=assigned_by,
                action="role_assigned",
                target=user_id,
                metadata={
                    "previous_role_id": str(previous_role_id) if previous_role_id else None,
                    "role_id": str(role_id),
                    "role_name": role.name,
                },
            )
        )
        logger.info("Assigned role %s to user %s", role.name, user_id)
        return RoleAssignmentResult(
            user_id=user_id,
            role_id=role_id,
            status=AssignmentStatus.APPLIED,
            previous_role_id=previous_role_id,
        )
