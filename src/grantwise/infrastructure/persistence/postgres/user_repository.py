"""PostgreSQL identity store repository (``app_user``)."""

from uuid import UUID

from psycopg import AsyncConnection

from grantwise.domain.entities import User


class PostgresUserRepository:
    """Reads identity records. Users are provisioned outside the engine."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, user_id: str) -> User | None:
        cur = await self._conn.execute(
            "SELECT id, is_active, role_id, mfa_enabled, email, attributes "
            "FROM app_user WHERE id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return User(
            id=r[0],
            is_active=r[1],
            role_id=r[2],
            mfa_enabled=r[3],
            email=r[4],
            attributes=dict(r[5] or {}),
        )

    async def count_by_role(self, role_id: UUID) -> int:
        cur = await self._conn.execute(
            "SELECT count(*) FROM app_user WHERE role_id = %s", (role_id,)
        )
        r = await cur.fetchone()
        return r[0]
