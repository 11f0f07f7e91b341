"""Lifespan middleware - pool open/close and catalog seeding on startup."""

from typing import Any

from psycopg_pool import AsyncConnectionPool

from grantwise.application.use_cases.catalog.seed_catalog import SeedCatalogUseCase


class PoolLifespanMiddleware:
    """Opens the connection pool on startup and closes it on shutdown.

    When ``seed_catalog`` is given, the default permission catalog and system
    roles are upserted once the pool is open.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        seed_catalog: SeedCatalogUseCase | None = None,
    ) -> None:
        self._pool = pool
        self._seed_catalog = seed_catalog

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.open()
        if self._seed_catalog is not None:
            await self._seed_catalog.execute()

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.close()
