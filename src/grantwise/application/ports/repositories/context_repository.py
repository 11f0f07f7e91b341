"""Permission context repository port."""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from grantwise.domain.entities import PermissionContext


class ContextRepository(Protocol):
    """Port for permission context persistence."""

    async def get_by_id(self, context_id: UUID) -> PermissionContext | None: ...

    async def get_many(self, context_ids: Iterable[UUID]) -> list[PermissionContext]: ...

    async def list_all(self) -> list[PermissionContext]: ...

    async def create(self, context: PermissionContext) -> PermissionContext: ...
