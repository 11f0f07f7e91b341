"""PostgreSQL user permission state repository.

The state is spread over ``app_user.role_id`` and four child tables. ``save``
rewrites the child rows of one user inside the caller's transaction. Mutations load
through ``get_for_update`` so the ``app_user`` row stays locked until commit and
concurrent writers for one user queue instead of overwriting each other.
"""

from datetime import datetime

from psycopg import AsyncConnection

from grantwise.domain.entities import (
    ContextAssignment,
    ResourceOverride,
    TemporaryGrant,
    UserPermissionState,
)

GRANT = "grant"
DENY = "deny"


class PostgresPermissionStateRepository:
    """Permission state repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, user_id: str) -> UserPermissionState | None:
        return await self._load(user_id, lock=False)

    async def get_for_update(self, user_id: str) -> UserPermissionState | None:
        """Like ``get``, holding a row lock on the user until the transaction ends."""
        return await self._load(user_id, lock=True)

    async def _load(self, user_id: str, *, lock: bool) -> UserPermissionState | None:
        query = "SELECT role_id, permissions_updated_at FROM app_user WHERE id = %s"
        if lock:
            query += " FOR UPDATE"
        cur = await self._conn.execute(query, (user_id,))
        r = await cur.fetchone()
        if not r:
            return None
        state = UserPermissionState(user_id=user_id, role_id=r[0])
        if r[1] is not None:
            state.last_updated = r[1]

        cur = await self._conn.execute(
            "SELECT permission_id, effect FROM user_custom_permission WHERE user_id = %s",
            (user_id,),
        )
        for permission_id, effect in await cur.fetchall():
            if effect == DENY:
                state.custom_denied.add(permission_id)
            else:
                state.custom_granted.add(permission_id)

        cur = await self._conn.execute(
            "SELECT permission_id, expires_at, granted_at, granted_by, reason "
            "FROM user_temporary_grant WHERE user_id = %s",
            (user_id,),
        )
        for g in await cur.fetchall():
            state.temporary_grants[g[0]] = TemporaryGrant(
                permission_id=g[0],
                expires_at=g[1],
                granted_at=g[2],
                granted_by=g[3],
                reason=g[4],
            )

        cur = await self._conn.execute(
            "SELECT context_id, assigned_at, assigned_by, is_active "
            "FROM user_context WHERE user_id = %s",
            (user_id,),
        )
        for c in await cur.fetchall():
            state.contexts[c[0]] = ContextAssignment(
                context_id=c[0], assigned_at=c[1], assigned_by=c[2], is_active=c[3]
            )

        cur = await self._conn.execute(
            "SELECT resource_type, resource_id, assigned_at, granted, denied, expires_at, "
            "assigned_by FROM user_resource_override WHERE user_id = %s",
            (user_id,),
        )
        for o in await cur.fetchall():
            override = ResourceOverride(
                resource_type=o[0],
                resource_id=o[1],
                assigned_at=o[2],
                granted=frozenset(o[3] or ()),
                denied=frozenset(o[4] or ()),
                expires_at=o[5],
                assigned_by=o[6],
            )
            state.resource_overrides[override.key] = override
        return state

    async def save(self, state: UserPermissionState) -> None:
        user_id = state.user_id
        await self._conn.execute(
            "UPDATE app_user SET role_id = %s, permissions_updated_at = %s WHERE id = %s",
            (state.role_id, state.last_updated, user_id),
        )
        for table in (
            "user_custom_permission",
            "user_temporary_grant",
            "user_context",
            "user_resource_override",
        ):
            await self._conn.execute(f"DELETE FROM {table} WHERE user_id = %s", (user_id,))

        async with self._conn.cursor() as cur:
            custom = [(user_id, pid, GRANT) for pid in state.custom_granted]
            custom += [(user_id, pid, DENY) for pid in state.custom_denied]
            if custom:
                await cur.executemany(
                    "INSERT INTO user_custom_permission (user_id, permission_id, effect) "
                    "VALUES (%s, %s, %s)",
                    custom,
                )
            if state.temporary_grants:
                await cur.executemany(
                    "INSERT INTO user_temporary_grant "
                    "(user_id, permission_id, expires_at, granted_at, granted_by, reason) "
                    "VALUES (%s, %s, %s, %s, %s, %s)",
                    [
                        (user_id, g.permission_id, g.expires_at, g.granted_at, g.granted_by, g.reason)
                        for g in state.temporary_grants.values()
                    ],
                )
            if state.contexts:
                await cur.executemany(
                    "INSERT INTO user_context "
                    "(user_id, context_id, assigned_at, assigned_by, is_active) "
                    "VALUES (%s, %s, %s, %s, %s)",
                    [
                        (user_id, c.context_id, c.assigned_at, c.assigned_by, c.is_active)
                        for c in state.contexts.values()
                    ],
                )
            if state.resource_overrides:
                await cur.executemany(
                    "INSERT INTO user_resource_override "
                    "(user_id, resource_type, resource_id, granted, denied, expires_at, "
                    "assigned_at, assigned_by) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
                    [
                        (
                            user_id,
                            o.resource_type,
                            o.resource_id,
                            list(o.granted),
                            list(o.denied),
                            o.expires_at,
                            o.assigned_at,
                            o.assigned_by,
                        )
                        for o in state.resource_overrides.values()
                    ],
                )

    async def list_user_ids_with_expired(self, now: datetime) -> list[str]:
        """Users holding at least one expired temporary grant or override."""
        cur = await self._conn.execute(
            "SELECT user_id FROM user_temporary_grant WHERE expires_at <= %s "
            "UNION "
            "SELECT user_id FROM user_resource_override "
            "WHERE expires_at IS NOT NULL AND expires_at <= %s",
            (now, now),
        )
        rows = await cur.fetchall()
        return sorted(r[0] for r in rows)
