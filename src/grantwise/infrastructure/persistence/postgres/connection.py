"""Connection pool construction and the database readiness probe."""

import logging

import psycopg
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)

POOL_NAME = "grantwise"


def create_pool(conninfo: str, min_size: int = 2, max_size: int = 10) -> AsyncConnectionPool:
    """Unopened pool; PoolLifespanMiddleware opens it on ASGI startup."""
    return AsyncConnectionPool(
        conninfo,
        min_size=min_size,
        max_size=max_size,
        open=False,
        name=POOL_NAME,
    )


async def ping(pool: AsyncConnectionPool, timeout: float = 2.0) -> bool:
    """True when a pooled connection answers ``SELECT 1`` within ``timeout`` seconds."""
    try:
        async with pool.connection(timeout=timeout) as conn:
            await conn.execute("SELECT 1")
    except psycopg.Error as e:
        # PoolTimeout and PoolClosed are psycopg errors too
        logger.warning("Database readiness check failed: %s", e)
        return False
    return True
