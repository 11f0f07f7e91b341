"""Resource store decorator that bounds every fetch with a timeout."""

import asyncio
from collections.abc import Mapping
from typing import Any

from grantwise.application.ports import ResourceStore
from grantwise.domain.exceptions import ResourceFetchTimeout


class TimeoutResourceStore:
    """Wraps a ResourceStore; raises ResourceFetchTimeout when a fetch exceeds ``timeout``."""

    def __init__(self, inner: ResourceStore, timeout: float) -> None:
        self._inner = inner
        self._timeout = timeout

    async def fetch(self, resource_type: str, resource_id: str) -> Mapping[str, Any] | None:
        try:
            return await asyncio.wait_for(
                self._inner.fetch(resource_type, resource_id), timeout=self._timeout
            )
        except TimeoutError:
            raise ResourceFetchTimeout(resource_type, resource_id, self._timeout) from None
