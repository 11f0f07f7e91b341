"""Seed catalog use case - idempotent install of default permissions and system roles."""

import logging
from dataclasses import replace
from uuid import uuid4

from grantwise.application.cache_invalidation import DEFAULT_ATTEMPTS, clear_or_fail
from grantwise.application.ports import DecisionCache
from grantwise.domain.entities import Permission, Role
from grantwise.domain.catalog import (
    DEFAULT_PERMISSIONS,
    SYSTEM_ROLES,
    PermissionSpec,
    RoleSpec,
)

logger = logging.getLogger(__name__)


class SeedCatalogUseCase:
    """Upsert the default permission catalog and the system roles."""

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: DecisionCache,
        permissions: tuple[PermissionSpec, ...] = DEFAULT_PERMISSIONS,
        roles: tuple[RoleSpec, ...] = SYSTEM_ROLES,
        invalidation_attempts: int = DEFAULT_ATTEMPTS,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._permissions = permissions
        self._roles = roles
        self._attempts = invalidation_attempts

    async def execute(self) -> tuple[int, int]:
        """Return (permissions upserted, roles upserted)."""
        async with self._uow_factory() as uow:
            by_name: dict[str, Permission] = {}
            for spec in self._permissions:
                existing = await uow.permissions.get_by_name(spec.name)
                permission = Permission(
                    id=existing.id if existing else uuid4(),
                    name=spec.name,
                    description=spec.description,
                    category=spec.category,
                    resource=spec.resource,
                    actions=frozenset({spec.action}),
                    is_active=existing.is_active if existing else True,
                    requires_mfa=spec.requires_mfa,
                )
                by_name[spec.name] = await uow.permissions.upsert(permission)

            for spec in self._roles:
                if spec.permissions == ("*",):
                    permission_ids = frozenset(p.id for p in by_name.values())
                else:
                    permission_ids = frozenset(
                        by_name[name].id for name in spec.permissions if name in by_name
                    )
                existing = await uow.roles.get_by_name(spec.name)
                role = Role(
                    id=existing.id if existing else uuid4(),
                    name=spec.name,
                    display_name=spec.display_name,
                    description=spec.description,
                    permissions=permission_ids,
                    priority=spec.priority,
                    is_system=True,
                    is_default=spec.is_default,
                    restrictions=replace(spec.restrictions),
                )
                if existing:
                    await uow.roles.update(role)
                else:
                    await uow.roles.create(role)

        await clear_or_fail(self._cache, self._attempts)
        logger.info(
            "Seeded %d permissions and %d system roles", len(self._permissions), len(self._roles)
        )
        return len(self._permissions), len(self._roles)
