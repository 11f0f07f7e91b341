"""Pytest fixtures for Grantwise tests."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import pytest

from grantwise.application.ports import AuditEvent
from grantwise.domain.entities import (
    Permission,
    PermissionContext,
    Role,
    RoleRestrictions,
    User,
    UserPermissionState,
)
from grantwise.domain.value_objects import (
    ConditionOperator,
    ContextCondition,
    PermissionCategory,
    PermissionName,
)
from grantwise.infrastructure.cache.in_memory_decision_cache import InMemoryDecisionCache


# --- Fake repositories ---


class FakeRowLocks:
    """Row locks held by the acquiring task until its unit of work ends.

    With ``interleave`` set, reads yield to the event loop so concurrent
    mutations actually overlap between read and write.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, Any], asyncio.Lock] = {}
        self._held: dict[asyncio.Task, list[asyncio.Lock]] = {}
        self.interleave = False
        self.acquired: list[tuple[str, Any]] = []

    async def pause(self) -> None:
        if self.interleave:
            await asyncio.sleep(0)

    async def acquire(self, table: str, key: Any) -> None:
        task = asyncio.current_task()
        lock = self._locks.setdefault((table, key), asyncio.Lock())
        held = self._held.setdefault(task, [])
        if lock not in held:
            await lock.acquire()
            held.append(lock)
        self.acquired.append((table, key))

    def release(self) -> None:
        for lock in self._held.pop(asyncio.current_task(), []):
            lock.release()


class FakePermissionRepository:
    """In-memory permission catalog."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, Permission] = {}

    def add(self, permission: Permission) -> Permission:
        self._by_id[permission.id] = permission
        return permission

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        return self._by_id.get(permission_id)

    async def get_by_name(self, name: str) -> Permission | None:
        return next((p for p in self._by_id.values() if p.name == name), None)

    async def get_many(self, permission_ids: Iterable[UUID]) -> dict[UUID, Permission]:
        return {pid: self._by_id[pid] for pid in set(permission_ids) if pid in self._by_id}

    async def list_all(self, *, include_inactive: bool = False) -> list[Permission]:
        items = [p for p in self._by_id.values() if include_inactive or p.is_active]
        return sorted(items, key=lambda p: (p.category.value, p.name))

    async def upsert(self, permission: Permission) -> Permission:
        existing = await self.get_by_name(permission.name)
        if existing is not None:
            permission = replace(permission, id=existing.id, is_active=existing.is_active)
        self._by_id[permission.id] = permission
        return permission

    async def update(self, permission: Permission) -> None:
        self._by_id[permission.id] = permission


class FakeRoleRepository:
    """In-memory role repository."""

    def __init__(self, locks: FakeRowLocks | None = None) -> None:
        self._by_id: dict[UUID, Role] = {}
        self._locks = locks or FakeRowLocks()

    def add(self, role: Role) -> Role:
        self._by_id[role.id] = role
        return role

    async def get_by_id(self, role_id: UUID) -> Role | None:
        return self._by_id.get(role_id)

    async def get_for_update(self, role_id: UUID) -> Role | None:
        await self._locks.acquire("role", role_id)
        return await self.get_by_id(role_id)

    async def get_by_name(self, name: str) -> Role | None:
        return next((r for r in self._by_id.values() if r.name == name), None)

    async def list_all(self) -> list[Role]:
        return sorted(self._by_id.values(), key=lambda r: (-r.priority, r.name))

    async def create(self, role: Role) -> Role:
        self._by_id[role.id] = role
        return role

    async def update(self, role: Role) -> None:
        self._by_id[role.id] = role

    async def delete(self, role_id: UUID) -> None:
        self._by_id.pop(role_id, None)


class FakeContextRepository:
    """In-memory permission context repository."""

    def __init__(self) -> None:
        self._by_id: dict[UUID, PermissionContext] = {}

    def add(self, context: PermissionContext) -> PermissionContext:
        self._by_id[context.id] = context
        return context

    async def get_by_id(self, context_id: UUID) -> PermissionContext | None:
        return self._by_id.get(context_id)

    async def get_many(self, context_ids: Iterable[UUID]) -> list[PermissionContext]:
        return [self._by_id[cid] for cid in set(context_ids) if cid in self._by_id]

    async def list_all(self) -> list[PermissionContext]:
        return sorted(self._by_id.values(), key=lambda c: (c.resource_type, c.name))

    async def create(self, context: PermissionContext) -> PermissionContext:
        self._by_id[context.id] = context
        return context


class FakeUserRepository:
    """In-memory identity store."""

    def __init__(self, locks: FakeRowLocks | None = None) -> None:
        self._by_id: dict[str, User] = {}
        self._locks = locks or FakeRowLocks()

    def add(self, user: User) -> User:
        self._by_id[user.id] = user
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        return self._by_id.get(user_id)

    async def count_by_role(self, role_id: UUID) -> int:
        await self._locks.pause()
        return sum(1 for u in self._by_id.values() if u.role_id == role_id)


class FakePermissionStateRepository:
    """In-memory permission state. Reads return copies; ``save`` keeps user.role_id in sync."""

    def __init__(self, users: FakeUserRepository, locks: FakeRowLocks | None = None) -> None:
        self._users = users
        self._locks = locks or FakeRowLocks()
        self._by_user: dict[str, UserPermissionState] = {}
        self.saves = 0

    async def get(self, user_id: str) -> UserPermissionState | None:
        await self._locks.pause()
        state = self._by_user.get(user_id)
        return copy.deepcopy(state) if state is not None else None

    async def get_for_update(self, user_id: str) -> UserPermissionState | None:
        await self._locks.acquire("app_user", user_id)
        return await self.get(user_id)

    async def save(self, state: UserPermissionState) -> None:
        self._by_user[state.user_id] = copy.deepcopy(state)
        user = self._users._by_id.get(state.user_id)
        if user is not None:
            user.role_id = state.role_id
        self.saves += 1

    async def list_user_ids_with_expired(self, now: datetime) -> list[str]:
        return sorted(
            user_id
            for user_id, state in self._by_user.items()
            if any(g.is_expired(now) for g in state.temporary_grants.values())
            or any(o.is_expired(now) for o in state.resource_overrides.values())
        )

    def put(self, state: UserPermissionState) -> None:
        self._by_user[state.user_id] = copy.deepcopy(state)
        user = self._users._by_id.get(state.user_id)
        if user is not None:
            user.role_id = state.role_id

    def raw(self, user_id: str) -> UserPermissionState | None:
        return self._by_user.get(user_id)


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.locks = FakeRowLocks()
        self.permissions = FakePermissionRepository()
        self.roles = FakeRoleRepository(self.locks)
        self.contexts = FakeContextRepository()
        self.users = FakeUserRepository(self.locks)
        self.permission_states = FakePermissionStateRepository(self.users, self.locks)
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


# --- Fake adapters ---


class FakeResourceStore:
    """Resource store backed by a dict of ``(type, id) -> row``; counts fetches."""

    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], dict[str, Any]] = {}
        self.fetches = 0
        self.error: Exception | None = None

    def add(self, resource_type: str, resource_id: str, **fields: Any) -> dict[str, Any]:
        row = {"id": resource_id, **fields}
        self.rows[(resource_type, resource_id)] = row
        return row

    async def fetch(self, resource_type: str, resource_id: str) -> Mapping[str, Any] | None:
        self.fetches += 1
        if self.error is not None:
            raise self.error
        return self.rows.get((resource_type, resource_id))


class RecordingAuditSink:
    """Audit sink that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    @property
    def actions(self) -> list[str]:
        return [e.action for e in self.events]


class FailingCache(InMemoryDecisionCache):
    """Decision cache whose invalidation always fails."""

    def __init__(self) -> None:
        super().__init__()
        self.invalidation_calls = 0

    async def invalidate_user(self, user_id: str) -> int:
        self.invalidation_calls += 1
        raise ConnectionError("cache unavailable")

    async def invalidate_role(self, role_id: UUID) -> int:
        self.invalidation_calls += 1
        raise ConnectionError("cache unavailable")

    async def clear(self) -> int:
        self.invalidation_calls += 1
        raise ConnectionError("cache unavailable")


# --- Builders ---


def make_permission(
    name: str,
    *,
    is_active: bool = True,
    requires_mfa: bool = False,
    category: PermissionCategory | None = None,
) -> Permission:
    parsed = PermissionName.parse(name)
    if category is None:
        try:
            category = PermissionCategory(parsed.resource)
        except ValueError:
            category = PermissionCategory.SYSTEM
    return Permission(
        id=uuid4(),
        name=name,
        description=name,
        category=category,
        resource=parsed.resource,
        actions=frozenset({parsed.action}),
        is_active=is_active,
        requires_mfa=requires_mfa,
    )


class World:
    """Test fixture world: one shared fake UoW plus helpers to populate it."""

    def __init__(self) -> None:
        self.uow = FakeUnitOfWork()
        self.resources = FakeResourceStore()
        self.audit = RecordingAuditSink()
        self.cache = InMemoryDecisionCache()

    @asynccontextmanager
    async def uow_factory(self) -> AsyncIterator[FakeUnitOfWork]:
        try:
            yield self.uow
            await self.uow.commit()
        finally:
            self.uow.locks.release()

    def permission(self, name: str, **kwargs: Any) -> Permission:
        existing = next((p for p in self.uow.permissions._by_id.values() if p.name == name), None)
        if existing is not None and not kwargs:
            return existing
        return self.uow.permissions.add(make_permission(name, **kwargs))

    def role(
        self,
        name: str,
        permissions: Iterable[str] = (),
        *,
        is_active: bool = True,
        is_system: bool = False,
        restrictions: RoleRestrictions | None = None,
    ) -> Role:
        return self.uow.roles.add(
            Role(
                id=uuid4(),
                name=name,
                display_name=name.capitalize(),
                permissions=frozenset(self.permission(p).id for p in permissions),
                is_active=is_active,
                is_system=is_system,
                restrictions=restrictions or RoleRestrictions(),
            )
        )

    def context(
        self,
        name: str,
        resource_type: str,
        condition: ContextCondition | dict[str, Any],
        permissions: Iterable[str],
        *,
        is_active: bool = True,
    ) -> PermissionContext:
        if isinstance(condition, dict):
            condition = ContextCondition.from_dict(condition)
        return self.uow.contexts.add(
            PermissionContext(
                id=uuid4(),
                name=name,
                display_name=name.replace("_", " ").title(),
                resource_type=resource_type,
                condition=condition,
                permissions=frozenset(self.permission(p).id for p in permissions),
                is_active=is_active,
            )
        )

    def user(
        self,
        user_id: str,
        role: Role | None = None,
        *,
        is_active: bool = True,
        mfa_enabled: bool = False,
        **attributes: Any,
    ) -> User:
        user = self.uow.users.add(
            User(
                id=user_id,
                is_active=is_active,
                role_id=role.id if role else None,
                mfa_enabled=mfa_enabled,
                attributes=dict(attributes),
            )
        )
        self.uow.permission_states.put(
            UserPermissionState(user_id=user_id, role_id=user.role_id)
        )
        return user

    def state(self, user_id: str) -> UserPermissionState:
        """Stored state of ``user_id``."""
        return self.uow.permission_states.raw(user_id)

    def edit_state(self, user_id: str, edit) -> None:
        state = copy.deepcopy(self.uow.permission_states.raw(user_id))
        edit(state)
        self.uow.permission_states.put(state)


def customer_context_condition() -> ContextCondition:
    return ContextCondition(
        field="customerId",
        operator=ConditionOperator.EQUALS,
        value_from="user.customerId",
    )


# --- Fixtures ---


@pytest.fixture
def world() -> World:
    """Fresh in-memory world for each test."""
    return World()


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()
