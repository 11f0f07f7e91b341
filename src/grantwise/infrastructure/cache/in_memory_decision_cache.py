"""In-memory decision cache with TTL and generation stamping."""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from grantwise.application.ports import CacheGeneration
from grantwise.domain.value_objects import Decision, DecisionKey

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    decision: Decision
    expires_at: float
    role_id: UUID | None


class InMemoryDecisionCache:
    """Process-local decision cache.

    Each user has a generation counter bumped by ``invalidate_user``; role
    invalidation and ``clear`` bump a global epoch. A ``put`` carrying an
    older snapshot is discarded, so a resolution racing an invalidation can
    never resurrect removed state.

    Snapshots from an older epoch are rejected whatever their user counter,
    so every epoch bump resets the per-user counters. When more users than
    ``max_entries`` have counters, the epoch is bumped to compact them.
    """

    def __init__(
        self,
        max_entries: int = 100_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.RLock()
        self._store: OrderedDict[DecisionKey, _Entry] = OrderedDict()
        self._user_keys: dict[str, set[DecisionKey]] = {}
        self._role_users: dict[UUID, set[str]] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._hits = 0
        self._misses = 0

    async def generation(self, user_id: str) -> CacheGeneration:
        with self._lock:
            return CacheGeneration(user=self._generations.get(user_id, 0), epoch=self._epoch)

    async def get(self, key: DecisionKey) -> Decision | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= self._clock():
                self._remove(key)
                self._misses += 1
                return None
            self._hits += 1
            return entry.decision

    async def put(
        self,
        key: DecisionKey,
        decision: Decision,
        ttl: float,
        generation: CacheGeneration,
        role_id: UUID | None = None,
    ) -> bool:
        with self._lock:
            current = CacheGeneration(
                user=self._generations.get(key.user_id, 0), epoch=self._epoch
            )
            if generation != current:
                return False
            self._remove(key)
            self._store[key] = _Entry(decision, self._clock() + ttl, role_id)
            self._user_keys.setdefault(key.user_id, set()).add(key)
            if role_id is not None:
                self._role_users.setdefault(role_id, set()).add(key.user_id)
            while len(self._store) > self._max_entries:
                oldest = next(iter(self._store))
                self._remove(oldest)
            return True

    async def invalidate_user(self, user_id: str) -> int:
        with self._lock:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            removed = self._drop_user(user_id)
            if len(self._generations) > self._max_entries:
                self._next_epoch()
            return removed

    async def invalidate_role(self, role_id: UUID) -> int:
        with self._lock:
            self._next_epoch()
            removed = 0
            for user_id in self._role_users.pop(role_id, set()):
                removed += self._drop_user(user_id)
            logger.debug("Invalidated role %s (%d cached decisions)", role_id, removed)
            return removed

    async def clear(self) -> int:
        with self._lock:
            self._next_epoch()
            removed = len(self._store)
            self._store.clear()
            self._user_keys.clear()
            self._role_users.clear()
            return removed

    @property
    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._store),
                "maxsize": self._max_entries,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total if total else 0.0,
            }

    def _next_epoch(self) -> None:
        self._epoch += 1
        self._generations.clear()

    def _drop_user(self, user_id: str) -> int:
        keys = self._user_keys.pop(user_id, set())
        for key in keys:
            entry = self._store.pop(key, None)
            if entry is not None and entry.role_id is not None:
                self._forget_role_user(entry.role_id, user_id)
        return len(keys)

    def _remove(self, key: DecisionKey) -> None:
        entry = self._store.pop(key, None)
        if entry is None:
            return
        keys = self._user_keys.get(key.user_id)
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._user_keys[key.user_id]
        if entry.role_id is not None and not any(
            self._store[k].role_id == entry.role_id for k in keys or ()
        ):
            self._forget_role_user(entry.role_id, key.user_id)

    def _forget_role_user(self, role_id: UUID, user_id: str) -> None:
        users = self._role_users.get(role_id)
        if users is None:
            return
        users.discard(user_id)
        if not users:
            del self._role_users[role_id]
