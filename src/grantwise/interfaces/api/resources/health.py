"""Health check endpoints."""

from collections.abc import Awaitable, Callable

import falcon
import falcon.asgi

from grantwise import __version__


class HealthResource:
    """Liveness, plus readiness backed by an optional dependency probe."""

    def __init__(self, readiness_check: Callable[[], Awaitable[bool]] | None = None) -> None:
        self._readiness_check = readiness_check

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok", "version": __version__}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - 503 while the database is unreachable."""
        if self._readiness_check is not None and not await self._readiness_check():
            resp.media = {"status": "unavailable"}
            resp.status = falcon.HTTP_503
            return
        resp.media = {"status": "ready"}
        resp.status = falcon.HTTP_200
