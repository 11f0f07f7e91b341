"""Unit of Work port - transactional boundary."""

from typing import Protocol

from grantwise.application.ports.repositories.context_repository import ContextRepository
from grantwise.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from grantwise.application.ports.repositories.permission_state_repository import (
    PermissionStateRepository,
)
from grantwise.application.ports.repositories.role_repository import RoleRepository
from grantwise.application.ports.repositories.user_repository import UserRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def permissions(self) -> PermissionRepository: ...

    @property
    def roles(self) -> RoleRepository: ...

    @property
    def contexts(self) -> ContextRepository: ...

    @property
    def users(self) -> UserRepository: ...

    @property
    def permission_states(self) -> PermissionStateRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
