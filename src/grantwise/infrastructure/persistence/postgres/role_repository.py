"""PostgreSQL role repository."""

from uuid import UUID

from psycopg import AsyncConnection

from grantwise.domain.entities import Role, RoleRestrictions

_SELECT = (
    "SELECT r.id, r.name, r.display_name, r.description, r.priority, r.is_active, "
    "r.is_system, r.is_default, r.max_users, r.requires_mfa, r.requires_approval, "
    "COALESCE(array_agg(rp.permission_id) FILTER (WHERE rp.permission_id IS NOT NULL), "
    "'{}') "
    "FROM role r LEFT JOIN role_permission rp ON rp.role_id = r.id"
)
_GROUP = " GROUP BY r.id"


def _row_to_role(r: tuple) -> Role:
    return Role(
        id=r[0],
        name=r[1],
        display_name=r[2],
        description=r[3] or "",
        priority=r[4],
        is_active=r[5],
        is_system=r[6],
        is_default=r[7],
        restrictions=RoleRestrictions(
            max_users=r[8], requires_mfa=r[9], requires_approval=r[10]
        ),
        permissions=frozenset(r[11]),
    )


class PostgresRoleRepository:
    """Role repository implementation. Permission membership lives in role_permission."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, role_id: UUID) -> Role | None:
        cur = await self._conn.execute(_SELECT + " WHERE r.id = %s" + _GROUP, (role_id,))
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def get_for_update(self, role_id: UUID) -> Role | None:
        """Lock the role row, then load it. Serializes writers and capped assignments."""
        cur = await self._conn.execute("SELECT id FROM role WHERE id = %s FOR UPDATE", (role_id,))
        if await cur.fetchone() is None:
            return None
        return await self.get_by_id(role_id)

    async def get_by_name(self, name: str) -> Role | None:
        cur = await self._conn.execute(_SELECT + " WHERE r.name = %s" + _GROUP, (name,))
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def list_all(self) -> list[Role]:
        """List roles, highest priority first."""
        cur = await self._conn.execute(_SELECT + _GROUP + " ORDER BY r.priority DESC, r.name")
        rows = await cur.fetchall()
        return [_row_to_role(r) for r in rows]

    async def create(self, role: Role) -> Role:
        await self._conn.execute(
            "INSERT INTO role (id, name, display_name, description, priority, is_active, "
            "is_system, is_default, max_users, requires_mfa, requires_approval) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                role.id,
                role.name,
                role.display_name,
                role.description,
                role.priority,
                role.is_active,
                role.is_system,
                role.is_default,
                role.restrictions.max_users,
                role.restrictions.requires_mfa,
                role.restrictions.requires_approval,
            ),
        )
        await self._replace_permissions(role)
        return role

    async def update(self, role: Role) -> None:
        await self._conn.execute(
            "UPDATE role SET display_name=%s, description=%s, priority=%s, is_active=%s, "
            "is_system=%s, is_default=%s, max_users=%s, requires_mfa=%s, "
            "requires_approval=%s WHERE id=%s",
            (
                role.display_name,
                role.description,
                role.priority,
                role.is_active,
                role.is_system,
                role.is_default,
                role.restrictions.max_users,
                role.restrictions.requires_mfa,
                role.restrictions.requires_approval,
                role.id,
            ),
        )
        await self._replace_permissions(role)

    async def delete(self, role_id: UUID) -> None:
        await self._conn.execute("DELETE FROM role WHERE id = %s", (role_id,))

    async def _replace_permissions(self, role: Role) -> None:
        await self._conn.execute("DELETE FROM role_permission WHERE role_id = %s", (role.id,))
        if not role.permissions:
            return
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO role_permission (role_id, permission_id) VALUES (%s, %s)",
                [(role.id, pid) for pid in role.permissions],
            )
