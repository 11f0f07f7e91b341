"""Sweep expired use case - background cleanup of expired grants and overrides.

Read paths already ignore expired entries; this only keeps stored state small.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, invalidate_user_or_fail
from grantwise.application.dto import SweepResult
from grantwise.application.ports import DecisionCache

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SweepExpiredUseCase:
    """Delete temporary grants and resource overrides whose ``expires_at`` has passed."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        invalidation_attempts: int = DEFAULT_ATTEMPTS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._attempts = invalidation_attempts
        self._clock = clock

    async def execute(self) -> SweepResult:
        now = self._clock()
        result = SweepResult()
        async with self._uow_factory() as uow:
            user_ids = await uow.permission_states.list_user_ids_with_expired(now)

        for user_id in user_ids:
            async with self._uow_factory() as uow:
                state = await uow.permission_states.get_for_update(user_id)
                if state is None:
                    continue
                grants, overrides = state.remove_expired(now)
                if not grants and not overrides:
                    continue
                state.touch(now)
                await uow.permission_states.save(state)

            await invalidate_user_or_fail(self._cache, user_id, self._attempts)
            result.users_updated += 1
            result.grants_removed += grants
            result.overrides_removed += overrides

        logger.info(
            "Swept expired entries for %d users (%d grants, %d overrides)",
            result.users_updated,
            result.grants_removed,
            result.overrides_removed,
        )
        return result
