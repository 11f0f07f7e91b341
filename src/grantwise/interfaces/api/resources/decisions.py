"""Decision and effective-permission API resources."""

import falcon.asgi

from grantwise.application.use_cases.authorization.decide import DecideUseCase
from grantwise.application.use_cases.authorization.get_effective_permissions import (
    GetEffectivePermissionsUseCase,
)
from grantwise.domain.exceptions import ValidationError
from grantwise.interfaces.api.resources.common import (
    MANAGE_PERMISSIONS,
    current_user,
    permission_to_dict,
    read_body,
    require_permission,
)


class DecisionsResource:
    """POST /v1/decisions - point authorization query."""

    def __init__(self, decide: DecideUseCase) -> None:
        self._decide = decide

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Decide for ``user_id`` (default: the caller).

        Asking about another user needs the same permission as reading their
        effective permissions.
        """
        caller = current_user(req)
        body = await read_body(req)
        resource_type = body.get("resource_type")
        action = body.get("action")
        if not resource_type or not action:
            raise ValidationError("resource_type and action are required")
        user_id = str(body.get("user_id") or caller.user_id)
        if user_id != caller.user_id:
            await require_permission(req, self._decide, MANAGE_PERMISSIONS)
        resource_id = body.get("resource_id")

        decision = await self._decide.execute(
            user_id,
            resource_type,
            action,
            str(resource_id) if resource_id is not None else None,
        )
        resp.media = {
            "user_id": user_id,
            "resource_type": resource_type,
            "action": action,
            "resource_id": resource_id,
            "allow": decision.allow,
            "sources": decision.source_names(),
        }
        resp.status = falcon.HTTP_200


class EffectivePermissionsResource:
    """GET /v1/users/{user_id}/effective-permissions."""

    def __init__(
        self,
        get_effective_permissions: GetEffectivePermissionsUseCase,
        resolver: DecideUseCase,
    ) -> None:
        self._get_effective = get_effective_permissions
        self._resolver = resolver

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = current_user(req)
        if caller.user_id != user_id:
            await require_permission(req, self._resolver, MANAGE_PERMISSIONS)

        result = await self._get_effective.execute(user_id)
        resp.media = {
            "user_id": result.user_id,
            "is_superadmin": result.is_superadmin,
            "permissions": [
                {
                    **permission_to_dict(e.permission),
                    "sources": [
                        {"type": s.kind.value, "name": s.name} for s in e.sources
                    ],
                }
                for e in result.permissions
            ],
            "denied_permissions": [permission_to_dict(p) for p in result.denied_permissions],
        }
        resp.status = falcon.HTTP_200
