"""PostgreSQL permission catalog repository."""

from collections.abc import Iterable
from uuid import UUID

from psycopg import AsyncConnection

from grantwise.domain.entities import Permission
from grantwise.domain.value_objects import PermissionCategory

_COLUMNS = "id, name, description, category, resource, actions, is_active, requires_mfa"


def _row_to_permission(r: tuple) -> Permission:
    return Permission(
        id=r[0],
        name=r[1],
        description=r[2] or "",
        category=PermissionCategory(r[3]),
        resource=r[4],
        actions=frozenset(r[5] or ()),
        is_active=r[6],
        requires_mfa=r[7],
    )


class PostgresPermissionRepository:
    """Permission catalog repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = %s", (permission_id,)
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def get_by_name(self, name: str) -> Permission | None:
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE name = %s", (name,)
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def get_many(self, permission_ids: Iterable[UUID]) -> dict[UUID, Permission]:
        """Fetch permissions by id, including inactive ones. Unknown ids are omitted."""
        ids = list(set(permission_ids))
        if not ids:
            return {}
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = ANY(%s)", (ids,)
        )
        rows = await cur.fetchall()
        return {r[0]: _row_to_permission(r) for r in rows}

    async def list_all(self, *, include_inactive: bool = False) -> list[Permission]:
        query = f"SELECT {_COLUMNS} FROM permission"
        if not include_inactive:
            query += " WHERE is_active"
        cur = await self._conn.execute(query + " ORDER BY category, name")
        rows = await cur.fetchall()
        return [_row_to_permission(r) for r in rows]

    async def upsert(self, permission: Permission) -> Permission:
        """Insert or update by name. Keeps the stored id and active flag."""
        cur = await self._conn.execute(
            "INSERT INTO permission "
            "(id, name, description, category, resource, actions, is_active, requires_mfa) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s) "
            "ON CONFLICT (name) DO UPDATE SET description = EXCLUDED.description, "
            "category = EXCLUDED.category, resource = EXCLUDED.resource, "
            "actions = EXCLUDED.actions, requires_mfa = EXCLUDED.requires_mfa "
            f"RETURNING {_COLUMNS}",
            (
                permission.id,
                permission.name,
                permission.description,
                permission.category.value,
                permission.resource,
                sorted(permission.actions),
                permission.is_active,
                permission.requires_mfa,
            ),
        )
        r = await cur.fetchone()
        return _row_to_permission(r)

    async def update(self, permission: Permission) -> None:
        await self._conn.execute(
            "UPDATE permission SET description=%s, category=%s, resource=%s, actions=%s, "
            "is_active=%s, requires_mfa=%s WHERE id=%s",
            (
                permission.description,
                permission.category.value,
                permission.resource,
                sorted(permission.actions),
                permission.is_active,
                permission.requires_mfa,
                permission.id,
            ),
        )
