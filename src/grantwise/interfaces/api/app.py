"""Falcon ASGI application - wires use cases to resources and routes."""

from collections.abc import Awaitable, Callable, Sequence

import falcon
import falcon.asgi
from falcon.asgi import App

from grantwise.application.ports import AuditSink, DecisionCache, ResourceStore
from grantwise.application.use_cases.authorization.decide import DecideUseCase
from grantwise.application.use_cases.authorization.get_effective_permissions import (
    GetEffectivePermissionsUseCase,
)
from grantwise.application.use_cases.context.assign_context import AssignContextUseCase
from grantwise.application.use_cases.context.create_context import CreateContextUseCase
from grantwise.application.use_cases.context.remove_context import RemoveContextUseCase
from grantwise.application.use_cases.maintenance.sweep_expired import SweepExpiredUseCase
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
from grantwise.application.use_cases.permission.set_permission_active import (
    SetPermissionActiveUseCase,
)
from grantwise.application.use_cases.role.assign_role import AssignRoleUseCase
from grantwise.application.use_cases.role.create_role import CreateRoleUseCase
from grantwise.application.use_cases.role.delete_role import DeleteRoleUseCase
from grantwise.application.use_cases.role.update_role import UpdateRoleUseCase
from grantwise.application.use_cases.role.update_role_permissions import (
    UpdateRolePermissionsUseCase,
)
from grantwise.config import Settings
from grantwise.domain.exceptions import GrantwiseError
from grantwise.interfaces.api.errors import handle_grantwise_error, handle_unexpected_error
from grantwise.interfaces.api.resources.catalog import (
    ContextsResource,
    PermissionResource,
    PermissionsResource,
)
from grantwise.interfaces.api.resources.decisions import (
    DecisionsResource,
    EffectivePermissionsResource,
)
from grantwise.interfaces.api.resources.health import HealthResource
from grantwise.interfaces.api.resources.maintenance import SweepResource
from grantwise.interfaces.api.resources.roles import (
    RolePermissionsResource,
    RoleResource,
    RolesResource,
)
from grantwise.interfaces.api.resources.users import (
    DenialResource,
    DenialsResource,
    GrantResource,
    GrantsResource,
    OverrideResource,
    OverridesResource,
    UserContextResource,
    UserContextsResource,
    UserRoleResource,
)


def create_app(
    unit_of_work_factory: type,
    cache: DecisionCache,
    resource_store: ResourceStore,
    audit_sink: AuditSink,
    settings: Settings,
    middleware: Sequence[object] = (),
    readiness_check: Callable[[], Awaitable[bool]] | None = None,
) -> App:
    """Create the Falcon ASGI app with all use cases and routes."""
    uow_factory = unit_of_work_factory
    retries = settings.cache_invalidation_retries

    decide = DecideUseCase(
        uow_factory,
        cache,
        resource_store,
        ttl_seconds=settings.decision_cache_ttl_seconds,
        inactive_ttl_seconds=settings.inactive_user_cache_ttl_seconds,
    )
    get_effective = GetEffectivePermissionsUseCase(uow_factory)
    assign_role = AssignRoleUseCase(uow_factory, cache, audit_sink, retries)
    grant = GrantPermissionUseCase(
        uow_factory,
        cache,
        audit_sink,
        default_temporary_seconds=settings.default_temporary_grant_seconds,
        invalidation_attempts=retries,
    )
    revoke = RevokePermissionUseCase(uow_factory, cache, audit_sink, retries)
    deny = DenyPermissionUseCase(uow_factory, cache, audit_sink, retries)
    remove_denial = RemoveDenialUseCase(uow_factory, cache, audit_sink, retries)
    assign_context = AssignContextUseCase(uow_factory, cache, audit_sink, retries)
    remove_context = RemoveContextUseCase(uow_factory, cache, audit_sink, retries)
    set_override = SetResourceOverrideUseCase(
        uow_factory, cache, audit_sink, resource_store, retries
    )
    remove_override = RemoveResourceOverrideUseCase(uow_factory, cache, audit_sink, retries)
    create_role = CreateRoleUseCase(uow_factory, audit_sink)
    delete_role = DeleteRoleUseCase(uow_factory, audit_sink)
    update_role = UpdateRoleUseCase(uow_factory, cache, audit_sink, retries)
    update_role_permissions = UpdateRolePermissionsUseCase(
        uow_factory, cache, audit_sink, retries
    )
    set_permission_active = SetPermissionActiveUseCase(uow_factory, cache, audit_sink, retries)
    create_context = CreateContextUseCase(uow_factory, audit_sink)
    sweep = SweepExpiredUseCase(uow_factory, cache, retries)

    app = falcon.asgi.App(middleware=list(middleware))
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(GrantwiseError, handle_grantwise_error)

    health = HealthResource(readiness_check)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")

    app.add_route("/v1/decisions", DecisionsResource(decide))
    app.add_route(
        "/v1/users/{user_id}/effective-permissions",
        EffectivePermissionsResource(get_effective, decide),
    )
    app.add_route("/v1/users/{user_id}/role", UserRoleResource(assign_role, decide))
    app.add_route("/v1/users/{user_id}/grants", GrantsResource(grant, decide))
    app.add_route(
        "/v1/users/{user_id}/grants/{permission_id}", GrantResource(revoke, decide)
    )
    app.add_route("/v1/users/{user_id}/denials", DenialsResource(deny, decide))
    app.add_route(
        "/v1/users/{user_id}/denials/{permission_id}", DenialResource(remove_denial, decide)
    )
    app.add_route(
        "/v1/users/{user_id}/contexts", UserContextsResource(assign_context, decide)
    )
    app.add_route(
        "/v1/users/{user_id}/contexts/{context_id}",
        UserContextResource(remove_context, decide),
    )
    app.add_route("/v1/users/{user_id}/overrides", OverridesResource(set_override, decide))
    app.add_route(
        "/v1/users/{user_id}/overrides/{resource_type}/{resource_id}",
        OverrideResource(remove_override, decide),
    )

    app.add_route("/v1/roles", RolesResource(uow_factory, create_role, decide))
    app.add_route("/v1/roles/{role_id}", RoleResource(delete_role, update_role, decide))
    app.add_route(
        "/v1/roles/{role_id}/permissions",
        RolePermissionsResource(update_role_permissions, decide),
    )
    app.add_route("/v1/permissions", PermissionsResource(uow_factory, decide))
    app.add_route(
        "/v1/permissions/{permission_id}",
        PermissionResource(set_permission_active, decide),
    )
    app.add_route("/v1/contexts", ContextsResource(uow_factory, create_context, decide))
    app.add_route("/v1/maintenance/sweep", SweepResource(sweep, decide))
    return app
