"""Decide use case - the resolution algorithm.

Combines role, custom grants/denials, temporary grants, contextual grants and
resource-instance overrides into one allow/deny decision. Steps run in a fixed
order: denials are removed before context grants are added, and overrides are
applied last.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from grantwise.application.ports import CacheGeneration, DecisionCache, ResourceStore
from grantwise.domain.entities import (
    Permission,
    PermissionContext,
    ResourceOverride,
    Role,
    User,
    UserPermissionState,
)
from grantwise.domain.exceptions import (
    GrantwiseError,
    NotFound,
    ResourceFetchTimeout,
    ValidationError,
)
from grantwise.domain.services import applies
from grantwise.domain.value_objects import (
    Decision,
    DecisionKey,
    PermissionName,
    SourceKind,
    SourceTag,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class _ResolutionInput:
    """Everything a decision reads, joined up front in one unit of work."""

    user: User
    state: UserPermissionState
    role: Role | None
    contexts: list[PermissionContext] = field(default_factory=list)
    override: ResourceOverride | None = None
    catalog: dict[UUID, Permission] = field(default_factory=dict)

    def name_of(self, permission_id: UUID) -> str | None:
        perm = self.catalog.get(permission_id)
        if perm is None or not perm.is_active:
            return None
        return perm.name


class DecideUseCase:
    """Answer "can user U perform action A on resource type T [instance I]?"."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        resource_store: ResourceStore,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        inactive_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._resource_store = resource_store
        self._ttl = ttl_seconds
        self._inactive_ttl = inactive_ttl_seconds
        self._clock = clock

    async def check(
        self,
        user_id: str,
        resource_type: str,
        action: str,
        resource_id: str | None = None,
    ) -> bool:
        """PermissionResolver port - boolean form of execute()."""
        decision = await self.execute(user_id, resource_type, action, resource_id)
        return decision.allow

    async def execute(
        self,
        user_id: str,
        resource_type: str,
        action: str,
        resource_id: str | None = None,
    ) -> Decision:
        """Return the decision for one point query.

        Raises ValidationError for malformed input and NotFound for an unknown
        user. Infrastructure failures deny without caching.
        """
        if not user_id or not resource_type or not action:
            raise ValidationError("user_id, resource_type and action are required")
        if resource_id is not None:
            resource_id = str(resource_id)

        key = DecisionKey(user_id, resource_type, action, resource_id)
        # Snapshot before any state is read so a concurrent invalidation wins.
        generation: CacheGeneration | None = None
        cached = None
        try:
            generation = await self._cache.generation(user_id)
            cached = await self._cache.get(key)
        except Exception:
            logger.exception("Decision cache read failed for %s", key)
        if cached is not None:
            logger.debug("Decision cache hit %s -> %s", key, cached.allow)
            return cached

        now = self._clock()
        try:
            data = await self._load(user_id, resource_type, resource_id, now)
        except GrantwiseError:
            raise
        except Exception:
            logger.exception("Failed to load permission state for %s, denying", key)
            return Decision.deny()

        if not data.user.is_active:
            decision = Decision.deny()
            await self._store(key, decision, self._inactive_ttl, generation, data.role)
            return decision

        if data.role is not None and data.role.is_superadmin:
            decision = Decision(allow=True, sources=(SourceTag(SourceKind.SUPERADMIN),))
            await self._store(key, decision, self._inactive_ttl, generation, data.role)
            return decision

        try:
            decision = await self._resolve(data, resource_type, action, resource_id)
        except Exception:
            logger.exception("Failed to resolve %s, denying", key)
            return Decision.deny()

        await self._store(key, decision, self._ttl, generation, data.role)
        logger.debug("Decision %s -> %s (%s)", key, decision.allow, decision.source_names())
        return decision

    async def _load(
        self,
        user_id: str,
        resource_type: str,
        resource_id: str | None,
        now: datetime,
    ) -> _ResolutionInput:
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise NotFound("User", user_id)
            state = await uow.permission_states.get(user_id)
            if state is None:
                state = UserPermissionState(user_id=user_id, role_id=user.role_id)

            role = None
            if state.role_id is not None:
                role = await uow.roles.get_by_id(state.role_id)
                if role is not None and not role.is_active:
                    role = None

            data = _ResolutionInput(user=user, state=state, role=role)
            if not user.is_active or (role is not None and role.is_superadmin):
                return data

            if resource_id is not None:
                context_ids = state.active_context_ids()
                if context_ids:
                    contexts = await uow.contexts.get_many(context_ids)
                    data.contexts = [
                        c
                        for c in contexts
                        if c.is_active and c.resource_type == resource_type
                    ]
                data.override = state.active_override(resource_type, resource_id, now)

            permission_ids: set[UUID] = set(state.custom_granted) | set(state.custom_denied)
            if role is not None:
                permission_ids |= role.permissions
            permission_ids |= {g.permission_id for g in state.live_temporary_grants(now)}
            for context in data.contexts:
                permission_ids |= context.permissions
            if data.override is not None:
                permission_ids |= data.override.granted | data.override.denied
            data.catalog = await uow.permissions.get_many(permission_ids)
            return data

    async def _resolve(
        self,
        data: _ResolutionInput,
        resource_type: str,
        action: str,
        resource_id: str | None,
    ) -> Decision:
        now = self._clock()
        state = data.state
        target = PermissionName.canonical(resource_type, action)
        granted: dict[UUID, list[SourceTag]] = {}

        def grant(permission_id: UUID, tag: SourceTag) -> None:
            granted.setdefault(permission_id, []).append(tag)

        # Base set: role, permanent custom grants, live temporary grants.
        if data.role is not None:
            for pid in data.role.permissions:
                grant(pid, SourceTag(SourceKind.ROLE, data.role.name))
        for pid in state.custom_granted:
            grant(pid, SourceTag(SourceKind.CUSTOM))
        for temp in state.live_temporary_grants(now):
            grant(temp.permission_id, SourceTag(SourceKind.TEMPORARY, temp.reason))

        for pid in state.custom_denied:
            granted.pop(pid, None)

        # Context grants are added after denials and are not filtered by them.
        if resource_id is not None and data.contexts:
            resource = await self._fetch_resource(resource_type, resource_id)
            for context in data.contexts:
                if applies(context, resource, data.user):
                    for pid in context.permissions:
                        grant(pid, SourceTag(SourceKind.CONTEXT, context.name))

        sources: list[SourceTag] = []
        for pid, tags in granted.items():
            if data.name_of(pid) == target:
                sources.extend(tags)
        allow = bool(sources)

        override = data.override
        if override is not None:
            if any(data.name_of(pid) == target for pid in override.denied):
                return Decision.deny()
            if any(data.name_of(pid) == target for pid in override.granted):
                sources.append(SourceTag(SourceKind.OVERRIDE))
                allow = True

        return Decision(allow=allow, sources=tuple(sources) if allow else ())

    async def _fetch_resource(
        self, resource_type: str, resource_id: str
    ) -> Mapping[str, Any] | None:
        try:
            return await self._resource_store.fetch(resource_type, resource_id)
        except ResourceFetchTimeout as e:
            logger.warning("%s; contextual grants skipped", e)
            return None

    async def _store(
        self,
        key: DecisionKey,
        decision: Decision,
        ttl: float,
        generation: CacheGeneration | None,
        role: Role | None,
    ) -> None:
        if generation is None:
            return
        try:
            stored = await self._cache.put(
                key, decision, ttl, generation, role_id=role.id if role else None
            )
        except Exception:
            logger.exception("Decision cache write failed for %s", key)
            return
        if not stored:
            logger.debug("Discarded stale decision write for %s", key)
