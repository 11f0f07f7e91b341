"""User (identity store) repository port."""

from typing import Protocol
from uuid import UUID

from grantwise.domain.entities import User


class UserRepository(Protocol):
    """Port for reading identity records."""

    async def get_by_id(self, user_id: str) -> User | None: ...

    async def count_by_role(self, role_id: UUID) -> int: ...
