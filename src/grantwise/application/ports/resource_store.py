"""Resource store port - fetches resource instances for context evaluation."""

from collections.abc import Mapping
from typing import Any, Protocol


class ResourceStore(Protocol):
    """Port for fetching one resource instance by type and id."""

    async def fetch(self, resource_type: str, resource_id: str) -> Mapping[str, Any] | None: ...
