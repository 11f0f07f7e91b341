"""Strict cache invalidation for mutation use cases.

A mutation is only reported as successful once the decision cache has
dropped the affected entries; repeated failures raise instead of leaving
stale decisions behind.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from grantwise.application.ports import DecisionCache
from grantwise.domain.exceptions import CacheInvalidationError

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.05
BACKOFF_FACTOR = 2


async def invalidate_user_or_fail(
    cache: DecisionCache,
    user_id: str,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
) -> None:
    """Invalidate every cached decision of ``user_id`` or raise CacheInvalidationError."""
    await _retrying(
        lambda: cache.invalidate_user(user_id),
        f"cached decisions for user {user_id}",
        attempts,
        backoff_seconds,
    )


async def invalidate_role_or_fail(
    cache: DecisionCache,
    role_id: UUID,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
) -> None:
    """Invalidate cached decisions of every holder of ``role_id`` or raise."""
    await _retrying(
        lambda: cache.invalidate_role(role_id),
        f"cached decisions for role {role_id}",
        attempts,
        backoff_seconds,
    )


async def clear_or_fail(
    cache: DecisionCache,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
) -> None:
    """Drop every cached decision or raise CacheInvalidationError."""
    await _retrying(cache.clear, "the decision cache", attempts, backoff_seconds)


async def _retrying(
    op: Callable[[], Awaitable[object]],
    description: str,
    attempts: int,
    backoff_seconds: float,
) -> None:
    max_attempts = max(attempts, 1)
    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            await op()
            return
        except Exception as e:
            last_error = e
            logger.warning(
                "Invalidating %s failed (attempt %d/%d): %s",
                description,
                attempt,
                max_attempts,
                e,
            )
        if attempt < max_attempts and backoff_seconds > 0:
            await asyncio.sleep(backoff_seconds * BACKOFF_FACTOR ** (attempt - 1))
    raise CacheInvalidationError(f"Could not invalidate {description}") from last_error
