"""Permission resolver port - point authorization queries."""

from typing import Protocol


class PermissionResolver(Protocol):
    """Port for checking whether a user may perform an action on a resource."""

    async def check(
        self,
        user_id: str,
        resource_type: str,
        action: str,
        resource_id: str | None = None,
    ) -> bool: ...
