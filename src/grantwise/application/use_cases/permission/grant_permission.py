"""Grant permission use case."""

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.ports import AuditEvent, AuditSink, DecisionCache
from grantwise.application.user_state import load_user_state
from grantwise.domain.entities import TemporaryGrant
from grantwise.domain.exceptions import Conflict, Inactive, NotFound, PolicyViolation

logger = logging.getLogger(__name__)

DEFAULT_TEMPORARY_SECONDS = 86400
DEFAULT_TEMPORARY_REASON = "Temporary access grant"


class GrantPermissionUseCase:
    """Grant a permission to a user, permanently or until ``expires_at``."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        audit_sink: AuditSink,
        default_temporary_seconds: int = DEFAULT_TEMPORARY_SECONDS,
        invalidation_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._audit = audit_sink
        self._default_temporary_seconds = default_temporary_seconds
        self._attempts = invalidation_attempts

    async def execute(
        self,
        user_id: str,
        permission_id: UUID,
        granted_by: str | None = None,
        *,
        temporary: bool = False,
        expires_at: datetime | None = None,
        expires_in: timedelta | None = None,
        reason: str | None = None,
    ) -> TemporaryGrant | None:
        """Grant permission. Returns the temporary grant entry, or None for a permanent grant.

        Re-granting a temporary permission replaces the previous entry.
        """
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            user, state = await load_user_state(uow, user_id)
            permission = await uow.permissions.get_by_id(permission_id)
            if permission is None:
                raise NotFound("Permission", permission_id)
            if not permission.is_active:
                raise Inactive("Permission", permission.name)
            if permission.requires_mfa and not user.mfa_enabled:
                raise PolicyViolation(f"MFA must be enabled for permission {permission.name}")
            if permission_id in state.custom_granted:
                raise Conflict(f"User {user_id} already has permission {permission.name}")

            grant = None
            if temporary:
                if expires_at is None:
                    expires_at = now + (
                        expires_in or timedelta(seconds=self._default_temporary_seconds)
                    )
                grant = TemporaryGrant(
                    permission_id=permission_id,
                    expires_at=expires_at,
                    granted_at=now,
                    granted_by=granted_by,
                    reason=reason or DEFAULT_TEMPORARY_REASON,
                )
                state.upsert_temporary_grant(grant)
            else:
                state.custom_granted.add(permission_id)
            state.touch(now)
            await uow.permission_states.save(state)

        await invalidate_user_or_fail(self._cache, user_id, self._attempts)
        self._audit.record(
            AuditEvent(
                actor=granted_by,
                action="permission_granted",
                target=user_id,
                metadata={
                    "permission_id": str(permission_id),
                    "permission_name": permission.name,
                    "temporary": temporary,
                    "expires_at": expires_at.isoformat() if grant else None,
                    "reason": reason,
                },
            )
        )
        logger.info(
            "Granted %s permission %s to user %s",
            "temporary" if temporary else "permanent",
            permission.name,
            user_id,
        )
        return grant
