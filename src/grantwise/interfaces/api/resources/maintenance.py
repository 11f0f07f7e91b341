"""Maintenance API resources."""

import falcon.asgi

from grantwise.application.ports import PermissionResolver
from grantwise.application.use_cases.maintenance.sweep_expired import SweepExpiredUseCase
from grantwise.interfaces.api.resources.common import MANAGE_SETTINGS, require_permission


class SweepResource:
    """POST /v1/maintenance/sweep - remove expired temporary grants and overrides."""

    def __init__(self, sweep_expired: SweepExpiredUseCase, resolver: PermissionResolver) -> None:
        self._sweep = sweep_expired
        self._resolver = resolver

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        await require_permission(req, self._resolver, MANAGE_SETTINGS)
        result = await self._sweep.execute()
        resp.media = {
            "users_updated": result.users_updated,
            "grants_removed": result.grants_removed,
            "overrides_removed": result.overrides_removed,
        }
        resp.status = falcon.HTTP_200
