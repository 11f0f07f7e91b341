"""Permission catalog repository port."""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from grantwise.domain.entities import Permission


class PermissionRepository(Protocol):
    """Port for permission catalog persistence."""

    async def get_by_id(self, permission_id: UUID) -> Permission | None: ...

    async def get_by_name(self, name: str) -> Permission | None: ...

    async def get_many(self, permission_ids: Iterable[UUID]) -> dict[UUID, Permission]: ...

    async def list_all(self, *, include_inactive: bool = False) -> list[Permission]: ...

    async def upsert(self, permission: Permission) -> Permission: ...

    async def update(self, permission: Permission) -> None: ...
