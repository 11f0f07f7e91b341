"""User permission state repository port."""

from datetime import datetime
from typing import Protocol

from grantwise.domain.entities import UserPermissionState


class PermissionStateRepository(Protocol):
    """Port for per-user permission state persistence."""

    async def get(self, user_id: str) -> UserPermissionState | None: ...

    async def get_for_update(self, user_id: str) -> UserPermissionState | None:
        """Load the state and lock it against other writers until the unit of work ends."""
        ...

    async def save(self, state: UserPermissionState) -> None: ...

    async def list_user_ids_with_expired(self, now: datetime) -> list[str]: ...
