"""Permission catalog and permission context API resources."""

import falcon.asgi

from grantwise.application.ports import PermissionResolver
from grantwise.application.use_cases.context.create_context import CreateContextUseCase
from grantwise.application.use_cases.permission.set_permission_active import (
    SetPermissionActiveUseCase,
)
from grantwise.domain.exceptions import ValidationError
from grantwise.interfaces.api.resources.common import (
    MANAGE_PERMISSIONS,
    MANAGE_SETTINGS,
    context_to_dict,
    parse_uuid,
    parse_uuid_list,
    permission_to_dict,
    read_body,
    require_permission,
)


class PermissionsResource:
    """GET /v1/permissions - catalog, optionally including inactive entries."""

    def __init__(self, unit_of_work_factory: type, resolver: PermissionResolver) -> None:
        self._uow_factory = unit_of_work_factory
        self._resolver = resolver

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        include_inactive = req.get_param_as_bool("include_inactive") or False
        category = req.get_param("category")
        async with self._uow_factory() as uow:
            permissions = await uow.permissions.list_all(include_inactive=include_inactive)
        if category:
            permissions = [p for p in permissions if p.category.value == category]
        resp.media = {"items": [permission_to_dict(p) for p in permissions]}
        resp.status = falcon.HTTP_200


class PermissionResource:
    """PATCH /v1/permissions/{permission_id} - activate or deactivate."""

    def __init__(
        self, set_permission_active: SetPermissionActiveUseCase, resolver: PermissionResolver
    ) -> None:
        self._set_active = set_permission_active
        self._resolver = resolver

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        body = await read_body(req)
        is_active = body.get("is_active")
        if not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")
        permission = await self._set_active.execute(
            parse_uuid(permission_id, "permission_id"),
            is_active,
            modified_by=caller.user_id,
        )
        resp.media = permission_to_dict(permission)
        resp.status = falcon.HTTP_200


class ContextsResource:
    """GET/POST /v1/contexts - list and create permission contexts."""

    def __init__(
        self,
        unit_of_work_factory: type,
        create_context: CreateContextUseCase,
        resolver: PermissionResolver,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._create = create_context
        self._resolver = resolver

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        resource_type = req.get_param("resource_type")
        async with self._uow_factory() as uow:
            contexts = await uow.contexts.list_all()
        if resource_type:
            contexts = [c for c in contexts if c.resource_type == resource_type]
        resp.media = {"items": [context_to_dict(c) for c in contexts]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        body = await read_body(req)
        condition = body.get("condition")
        if not isinstance(condition, dict):
            raise ValidationError("condition must be an object")
        context = await self._create.execute(
            body.get("name") or "",
            body.get("resource_type") or "",
            condition,
            parse_uuid_list(body.get("permissions"), "permissions"),
            display_name=body.get("display_name") or "",
            description=body.get("description") or "",
            created_by=caller.user_id,
        )
        resp.media = context_to_dict(context)
        resp.status = falcon.HTTP_201
