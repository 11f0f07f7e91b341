"""Role API resources."""

import falcon.asgi

from grantwise.application.dto import RoleUpdate
from grantwise.application.ports import PermissionResolver
from grantwise.application.use_cases.role.create_role import CreateRoleUseCase
from grantwise.application.use_cases.role.delete_role import DeleteRoleUseCase
from grantwise.application.use_cases.role.update_role import UpdateRoleUseCase
from grantwise.application.use_cases.role.update_role_permissions import (
    UpdateRolePermissionsUseCase,
)
from grantwise.domain.entities import RoleRestrictions
from grantwise.domain.exceptions import ValidationError
from grantwise.interfaces.api.resources.common import (
    MANAGE_PERMISSIONS,
    MANAGE_SETTINGS,
    parse_uuid,
    parse_uuid_list,
    read_body,
    require_permission,
    role_to_dict,
)


class RolesResource:
    """GET/POST /v1/roles - list and create roles."""

    def __init__(
        self,
        unit_of_work_factory: type,
        create_role: CreateRoleUseCase,
        resolver: PermissionResolver,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._create = create_role
        self._resolver = resolver

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List roles, highest priority first."""
        await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        async with self._uow_factory() as uow:
            roles = await uow.roles.list_all()
        resp.media = {"items": [role_to_dict(r) for r in roles]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        body = await read_body(req)
        raw_restrictions = body.get("restrictions") or {}
        if not isinstance(raw_restrictions, dict):
            raise ValidationError("restrictions must be an object")
        try:
            restrictions = RoleRestrictions(
                max_users=int(raw_restrictions.get("max_users", 0)),
                requires_mfa=bool(raw_restrictions.get("requires_mfa", False)),
                requires_approval=bool(raw_restrictions.get("requires_approval", False)),
            )
            priority = int(body.get("priority", 100))
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e)) from None

        role = await self._create.execute(
            body.get("name") or "",
            body.get("display_name") or "",
            parse_uuid_list(body.get("permissions"), "permissions"),
            description=body.get("description") or "",
            priority=priority,
            restrictions=restrictions,
            created_by=caller.user_id,
        )
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_201


class RoleResource:
    """PATCH/DELETE /v1/roles/{role_id}."""

    def __init__(
        self,
        delete_role: DeleteRoleUseCase,
        update_role: UpdateRoleUseCase,
        resolver: PermissionResolver,
    ) -> None:
        self._delete = delete_role
        self._update = update_role
        self._resolver = resolver

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        """Change attributes and restrictions of a custom role."""
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        body = await read_body(req)
        raw_restrictions = body.get("restrictions") or {}
        if not isinstance(raw_restrictions, dict):
            raise ValidationError("restrictions must be an object")
        update = RoleUpdate(
            display_name=_optional(body, "display_name", str),
            description=_optional(body, "description", str),
            priority=_optional(body, "priority", int),
            is_active=_optional(body, "is_active", bool),
            max_users=_optional(raw_restrictions, "max_users", int),
            requires_mfa=_optional(raw_restrictions, "requires_mfa", bool),
            requires_approval=_optional(raw_restrictions, "requires_approval", bool),
        )

        role = await self._update.execute(
            parse_uuid(role_id, "role_id"), update, modified_by=caller.user_id
        )
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        await self._delete.execute(parse_uuid(role_id, "role_id"), deleted_by=caller.user_id)
        resp.status = falcon.HTTP_204


class RolePermissionsResource:
    """PUT /v1/roles/{role_id}/permissions - replace a custom role's permission set."""

    def __init__(
        self,
        update_role_permissions: UpdateRolePermissionsUseCase,
        resolver: PermissionResolver,
    ) -> None:
        self._update = update_role_permissions
        self._resolver = resolver

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_SETTINGS)
        body = await read_body(req)
        if "permissions" not in body:
            raise ValidationError("permissions is required")
        role = await self._update.execute(
            parse_uuid(role_id, "role_id"),
            parse_uuid_list(body["permissions"], "permissions"),
            modified_by=caller.user_id,
        )
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_200


def _optional(body: dict, key: str, kind: type) -> object:
    """``body[key]`` checked against ``kind``; None when absent."""
    value = body.get(key)
    if value is None:
        return None
    # bool is an int subclass; a JSON true must not pass as a number
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValidationError(f"{key} must be of type {kind.__name__}")
    return value
