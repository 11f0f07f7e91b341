"""Per-user permission state API resources: role, grants, denials, contexts, overrides."""

import falcon.asgi

from grantwise.application.ports import PermissionResolver
from grantwise.application.use_cases.context.assign_context import AssignContextUseCase
from grantwise.application.use_cases.context.remove_context import RemoveContextUseCase
from grantwise.application.use_cases.override.remove_resource_override import (
    RemoveResourceOverrideUseCase,
)
from grantwise.application.use_cases.override.set_resource_override import (
    SetResourceOverrideUseCase,
)
from grantwise.application.use_cases.permission.deny_permission import (
    DenyPermissionUseCase,
    RemoveDenialUseCase,
)
from grantwise.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from grantwise.application.use_cases.permission.revoke_permission import (
    RevokePermissionUseCase,
)
from grantwise.application.use_cases.role.assign_role import AssignRoleUseCase
from grantwise.domain.exceptions import ValidationError
from grantwise.interfaces.api.resources.common import (
    MANAGE_PERMISSIONS,
    override_to_dict,
    parse_datetime,
    parse_duration,
    parse_uuid,
    parse_uuid_list,
    read_body,
    require_permission,
    temporary_grant_to_dict,
)


class UserRoleResource:
    """PUT /v1/users/{user_id}/role - assign role."""

    def __init__(self, assign_role: AssignRoleUseCase, resolver: PermissionResolver) -> None:
        self._assign = assign_role
        self._resolver = resolver

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        body = await read_body(req)
        role_id = parse_uuid(body.get("role_id"), "role_id")

        result = await self._assign.execute(user_id, role_id, assigned_by=caller.user_id)
        resp.media = {
            "user_id": result.user_id,
            "role_id": str(result.role_id),
            "status": result.status.value,
            "previous_role_id": str(result.previous_role_id) if result.previous_role_id else None,
        }
        resp.status = falcon.HTTP_200


class GrantsResource:
    """POST /v1/users/{user_id}/grants - permanent or temporary grant."""

    def __init__(
        self, grant_permission: GrantPermissionUseCase, resolver: PermissionResolver
    ) -> None:
        self._grant = grant_permission
        self._resolver = resolver

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        body = await read_body(req)
        permission_id = parse_uuid(body.get("permission_id"), "permission_id")
        temporary = bool(body.get("temporary", False))

        grant = await self._grant.execute(
            user_id,
            permission_id,
            granted_by=caller.user_id,
            temporary=temporary,
            expires_at=parse_datetime(body.get("expires_at"), "expires_at"),
            expires_in=parse_duration(body.get("expires_in_seconds"), "expires_in_seconds"),
            reason=body.get("reason"),
        )
        if grant is None:
            resp.media = {"user_id": user_id, "permission_id": str(permission_id), "temporary": False}
        else:
            resp.media = {"user_id": user_id, "temporary": True, **temporary_grant_to_dict(grant)}
        resp.status = falcon.HTTP_201


class GrantResource:
    """DELETE /v1/users/{user_id}/grants/{permission_id} - revoke."""

    def __init__(
        self, revoke_permission: RevokePermissionUseCase, resolver: PermissionResolver
    ) -> None:
        self._revoke = revoke_permission
        self._resolver = resolver

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        permission_id: str,
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        await self._revoke.execute(
            user_id, parse_uuid(permission_id, "permission_id"), revoked_by=caller.user_id
        )
        resp.status = falcon.HTTP_204


class DenialsResource:
    """POST /v1/users/{user_id}/denials - explicit denial."""

    def __init__(
        self, deny_permission: DenyPermissionUseCase, resolver: PermissionResolver
    ) -> None:
        self._deny = deny_permission
        self._resolver = resolver

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        body = await read_body(req)
        permission_id = parse_uuid(body.get("permission_id"), "permission_id")
        await self._deny.execute(user_id, permission_id, denied_by=caller.user_id)
        resp.media = {"user_id": user_id, "permission_id": str(permission_id)}
        resp.status = falcon.HTTP_201


class DenialResource:
    """DELETE /v1/users/{user_id}/denials/{permission_id}."""

    def __init__(self, remove_denial: RemoveDenialUseCase, resolver: PermissionResolver) -> None:
        self._remove = remove_denial
        self._resolver = resolver

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        permission_id: str,
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        await self._remove.execute(
            user_id, parse_uuid(permission_id, "permission_id"), removed_by=caller.user_id
        )
        resp.status = falcon.HTTP_204


class UserContextsResource:
    """POST /v1/users/{user_id}/contexts - assign a permission context."""

    def __init__(
        self, assign_context: AssignContextUseCase, resolver: PermissionResolver
    ) -> None:
        self._assign = assign_context
        self._resolver = resolver

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        body = await read_body(req)
        context_id = parse_uuid(body.get("context_id"), "context_id")
        assignment = await self._assign.execute(user_id, context_id, assigned_by=caller.user_id)
        resp.media = {
            "user_id": user_id,
            "context_id": str(assignment.context_id),
            "assigned_at": assignment.assigned_at.isoformat(),
            "is_active": assignment.is_active,
        }
        resp.status = falcon.HTTP_201


class UserContextResource:
    """DELETE /v1/users/{user_id}/contexts/{context_id}."""

    def __init__(
        self, remove_context: RemoveContextUseCase, resolver: PermissionResolver
    ) -> None:
        self._remove = remove_context
        self._resolver = resolver

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        context_id: str,
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        await self._remove.execute(
            user_id, parse_uuid(context_id, "context_id"), removed_by=caller.user_id
        )
        resp.status = falcon.HTTP_204


class OverridesResource:
    """PUT /v1/users/{user_id}/overrides - upsert a resource-instance override."""

    def __init__(
        self, set_override: SetResourceOverrideUseCase, resolver: PermissionResolver
    ) -> None:
        self._set = set_override
        self._resolver = resolver

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        body = await read_body(req)
        resource_type = body.get("resource_type")
        resource_id = body.get("resource_id")
        if not resource_type or resource_id is None:
            raise ValidationError("resource_type and resource_id are required")

        override = await self._set.execute(
            user_id,
            resource_type,
            str(resource_id),
            granted=parse_uuid_list(body.get("granted"), "granted"),
            denied=parse_uuid_list(body.get("denied"), "denied"),
            expires_at=parse_datetime(body.get("expires_at"), "expires_at"),
            expires_in=parse_duration(body.get("expires_in_seconds"), "expires_in_seconds"),
            assigned_by=caller.user_id,
        )
        resp.media = {"user_id": user_id, **override_to_dict(override)}
        resp.status = falcon.HTTP_200


class OverrideResource:
    """DELETE /v1/users/{user_id}/overrides/{resource_type}/{resource_id}."""

    def __init__(
        self, remove_override: RemoveResourceOverrideUseCase, resolver: PermissionResolver
    ) -> None:
        self._remove = remove_override
        self._resolver = resolver

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        caller = await require_permission(req, self._resolver, MANAGE_PERMISSIONS)
        await self._remove.execute(
            user_id, resource_type, resource_id, removed_by=caller.user_id
        )
        resp.status = falcon.HTTP_204
