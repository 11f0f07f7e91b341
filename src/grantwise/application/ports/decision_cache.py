"""Decision cache port - memoizes decisions, invalidated on every mutation."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from grantwise.domain.value_objects import Decision, DecisionKey


@dataclass(frozen=True)
class CacheGeneration:
    """Snapshot of the invalidation counters a decision was computed under."""

    user: int
    epoch: int


class DecisionCache(Protocol):
    """Port for the decision cache.

    ``put`` must discard a write whose ``generation`` is older than the
    current one for that user, so invalidation wins over racing resolutions.
    """

    async def generation(self, user_id: str) -> CacheGeneration: ...

    async def get(self, key: DecisionKey) -> Decision | None: ...

    async def put(
        self,
        key: DecisionKey,
        decision: Decision,
        ttl: float,
        generation: CacheGeneration,
        role_id: UUID | None = None,
    ) -> bool: ...

    async def invalidate_user(self, user_id: str) -> int: ...

    async def invalidate_role(self, role_id: UUID) -> int: ...

    async def clear(self) -> int: ...
