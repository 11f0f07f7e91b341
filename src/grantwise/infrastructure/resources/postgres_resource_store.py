"""PostgreSQL resource store - reads resource instances from per-type tables."""

import logging
from collections.abc import Mapping
from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


class PostgresResourceStore:
    """Fetch one row by ``id`` from the table mapped to the resource type."""

    def __init__(self, pool: AsyncConnectionPool, tables: Mapping[str, str]) -> None:
        self._pool = pool
        self._tables = dict(tables)

    async def fetch(self, resource_type: str, resource_id: str) -> Mapping[str, Any] | None:
        """Return the row as a dict, or None when the type is unmapped or the row is missing."""
        table = self._tables.get(resource_type)
        if table is None:
            logger.warning("Unknown resource type: %s", resource_type)
            return None
        query = sql.SQL("SELECT * FROM {} WHERE id::text = %s").format(sql.Identifier(table))
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, (str(resource_id),))
                return await cur.fetchone()
