"""Get effective permissions use case - admin read model with sources."""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import UUID

from grantwise.application.dto import EffectivePermission, EffectivePermissions
from grantwise.domain.entities import UserPermissionState
from grantwise.domain.exceptions import NotFound
from grantwise.domain.value_objects import SourceKind, SourceTag


def _utcnow() -> datetime:
    return datetime.now(UTC)


class GetEffectivePermissionsUseCase:
    """List a user's permissions with every granting source, and their denials.

    Assigned contexts contribute their permissions without evaluating any
    resource instance; custom denials remove a permission from every source.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock

    async def execute(self, user_id: str) -> EffectivePermissions:
        now = self._clock()
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
            if user is None:
                raise NotFound("User", user_id)
            state = await uow.permission_states.get(user_id)
            if state is None:
                state = UserPermissionState(user_id=user_id, role_id=user.role_id)

            role = await uow.roles.get_by_id(state.role_id) if state.role_id else None
            if role is not None and not role.is_active:
                role = None

            contexts = [
                c
                for c in await uow.contexts.get_many(state.active_context_ids())
                if c.is_active
            ]

            sources: dict[UUID, list[SourceTag]] = {}

            def add(permission_id: UUID, tag: SourceTag) -> None:
                sources.setdefault(permission_id, []).append(tag)

            if role is not None:
                for pid in role.permissions:
                    add(pid, SourceTag(SourceKind.ROLE, role.display_name or role.name))
            for pid in state.custom_granted:
                add(pid, SourceTag(SourceKind.CUSTOM, "Custom Grant"))
            for grant in state.live_temporary_grants(now):
                add(grant.permission_id, SourceTag(SourceKind.TEMPORARY, grant.reason))
            for context in contexts:
                for pid in context.permissions:
                    add(pid, SourceTag(SourceKind.CONTEXT, context.display_name or context.name))

            catalog = await uow.permissions.get_many(set(sources) | state.custom_denied)

        effective = [
            EffectivePermission(permission=catalog[pid], sources=tags)
            for pid, tags in sources.items()
            if pid not in state.custom_denied
            and pid in catalog
            and catalog[pid].is_active
        ]
        effective.sort(key=lambda e: e.permission.name)
        denied = sorted(
            (catalog[pid] for pid in state.custom_denied if pid in catalog),
            key=lambda p: p.name,
        )
        return EffectivePermissions(
            user_id=user_id,
            permissions=effective,
            denied_permissions=denied,
            is_superadmin=role is not None and role.is_superadmin,
        )
