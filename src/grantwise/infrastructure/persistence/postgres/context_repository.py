"""PostgreSQL permission context repository."""

from collections.abc import Iterable
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from grantwise.domain.entities import PermissionContext
from grantwise.domain.value_objects import ContextCondition

_SELECT = (
    "SELECT c.id, c.name, c.display_name, c.description, c.resource_type, c.condition, "
    "c.is_active, "
    "COALESCE(array_agg(cp.permission_id) FILTER (WHERE cp.permission_id IS NOT NULL), "
    "'{}') "
    "FROM permission_context c LEFT JOIN context_permission cp ON cp.context_id = c.id"
)
_GROUP = " GROUP BY c.id"


def _row_to_context(r: tuple) -> PermissionContext:
    return PermissionContext(
        id=r[0],
        name=r[1],
        display_name=r[2] or "",
        description=r[3] or "",
        resource_type=r[4],
        condition=ContextCondition.from_dict(r[5]),
        is_active=r[6],
        permissions=frozenset(r[7]),
    )


class PostgresContextRepository:
    """Permission context repository implementation. Conditions are stored as jsonb."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, context_id: UUID) -> PermissionContext | None:
        cur = await self._conn.execute(_SELECT + " WHERE c.id = %s" + _GROUP, (context_id,))
        r = await cur.fetchone()
        return _row_to_context(r) if r else None

    async def get_many(self, context_ids: Iterable[UUID]) -> list[PermissionContext]:
        ids = list(set(context_ids))
        if not ids:
            return []
        cur = await self._conn.execute(_SELECT + " WHERE c.id = ANY(%s)" + _GROUP, (ids,))
        rows = await cur.fetchall()
        return [_row_to_context(r) for r in rows]

    async def list_all(self) -> list[PermissionContext]:
        cur = await self._conn.execute(_SELECT + _GROUP + " ORDER BY c.resource_type, c.name")
        rows = await cur.fetchall()
        return [_row_to_context(r) for r in rows]

    async def create(self, context: PermissionContext) -> PermissionContext:
        await self._conn.execute(
            "INSERT INTO permission_context "
            "(id, name, display_name, description, resource_type, condition, is_active) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                context.id,
                context.name,
                context.display_name,
                context.description,
                context.resource_type,
                Jsonb(context.condition.to_dict()),
                context.is_active,
            ),
        )
        if context.permissions:
            async with self._conn.cursor() as cur:
                await cur.executemany(
                    "INSERT INTO context_permission (context_id, permission_id) VALUES (%s, %s)",
                    [(context.id, pid) for pid in context.permissions],
                )
        return context
