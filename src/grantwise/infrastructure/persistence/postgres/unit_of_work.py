"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, AsyncExitStack, asynccontextmanager

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from grantwise.infrastructure.persistence.postgres.context_repository import (
    PostgresContextRepository,
)
from grantwise.infrastructure.persistence.postgres.permission_repository import (
    PostgresPermissionRepository,
)
from grantwise.infrastructure.persistence.postgres.permission_state_repository import (
    PostgresPermissionStateRepository,
)
from grantwise.infrastructure.persistence.postgres.role_repository import (
    PostgresRoleRepository,
)
from grantwise.infrastructure.persistence.postgres.user_repository import (
    PostgresUserRepository,
)


class PostgresUnitOfWork:
    """One pooled connection and one transaction shared by every repository.

    Repositories only exist between ``__aenter__`` and ``__aexit__``.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._stack = AsyncExitStack()
        self._conn: AsyncConnection | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        conn = await self._stack.enter_async_context(self._pool.connection())
        self._conn = conn
        self._permissions = PostgresPermissionRepository(conn)
        self._roles = PostgresRoleRepository(conn)
        self._contexts = PostgresContextRepository(conn)
        self._users = PostgresUserRepository(conn)
        self._permission_states = PostgresPermissionStateRepository(conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        try:
            if exc_type is not None and self._conn is not None:
                await self._conn.rollback()
        finally:
            self._conn = None
            await self._stack.aclose()

    @property
    def permissions(self) -> PostgresPermissionRepository:
        return self._permissions

    @property
    def roles(self) -> PostgresRoleRepository:
        return self._roles

    @property
    def contexts(self) -> PostgresContextRepository:
        return self._contexts

    @property
    def users(self) -> PostgresUserRepository:
        return self._users

    @property
    def permission_states(self) -> PostgresPermissionStateRepository:
        return self._permission_states

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(
    pool: AsyncConnectionPool,
) -> Callable[[], AbstractAsyncContextManager[PostgresUnitOfWork]]:
    """Create the UnitOfWork factory: commit on success, rollback on any error."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        # an exception escaping the block reaches __aexit__, which rolls back
        async with PostgresUnitOfWork(pool) as uow:
            yield uow
            await uow.commit()

    return factory
