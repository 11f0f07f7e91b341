"""Shared request guards, parsing and serializers for API resources."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import falcon
import falcon.asgi

from grantwise.application.ports import PermissionResolver
from grantwise.domain.entities import (
    Permission,
    PermissionContext,
    ResourceOverride,
    Role,
    TemporaryGrant,
)
from grantwise.domain.exceptions import NotFound, PermissionDenied, ValidationError
from grantwise.interfaces.api.middleware.auth import RequestUser

# (resource_type, action) pairs checked for administrative routes
MANAGE_PERMISSIONS = ("user", "update:permission")
MANAGE_SETTINGS = ("admin", "system:settings")


def current_user(req: falcon.asgi.Request) -> RequestUser:
    user = getattr(req.context, "user", None)
    if not user:
        raise falcon.HTTPUnauthorized(description="Authentication required")
    return user


async def require_permission(
    req: falcon.asgi.Request,
    resolver: PermissionResolver,
    required: tuple[str, str],
) -> RequestUser:
    """Return the caller if it holds ``required``; raise PermissionDenied otherwise."""
    user = current_user(req)
    resource_type, action = required
    try:
        allowed = await resolver.check(user.user_id, resource_type, action)
    except NotFound:
        allowed = False
    if not allowed:
        raise PermissionDenied(f"Missing permission {resource_type}:{action}")
    return user


async def read_body(req: falcon.asgi.Request) -> dict[str, Any]:
    body = await req.get_media(default_when_empty={})
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def parse_uuid(value: Any, field: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r}") from None


def parse_uuid_list(values: Any, field: str) -> list[UUID]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValidationError(f"{field} must be a list")
    return [parse_uuid(v, field) for v in values]


def parse_datetime(value: Any, field: str) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_duration(value: Any, field: str) -> timedelta | None:
    """Parse a positive number of seconds."""
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r}") from None
    if seconds <= 0:
        raise ValidationError(f"{field} must be positive")
    return timedelta(seconds=seconds)


def permission_to_dict(p: Permission) -> dict[str, Any]:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "category": p.category.value,
        "resource": p.resource,
        "actions": sorted(p.actions),
        "is_active": p.is_active,
        "requires_mfa": p.requires_mfa,
    }


def role_to_dict(r: Role) -> dict[str, Any]:
    return {
        "id": str(r.id),
        "name": r.name,
        "display_name": r.display_name,
        "description": r.description,
        "permissions": sorted(str(pid) for pid in r.permissions),
        "priority": r.priority,
        "is_active": r.is_active,
        "is_system": r.is_system,
        "is_default": r.is_default,
        "restrictions": {
            "max_users": r.restrictions.max_users,
            "requires_mfa": r.restrictions.requires_mfa,
            "requires_approval": r.restrictions.requires_approval,
        },
    }


def context_to_dict(c: PermissionContext) -> dict[str, Any]:
    return {
        "id": str(c.id),
        "name": c.name,
        "display_name": c.display_name,
        "description": c.description,
        "resource_type": c.resource_type,
        "condition": c.condition.to_dict(),
        "permissions": sorted(str(pid) for pid in c.permissions),
        "is_active": c.is_active,
    }


def temporary_grant_to_dict(g: TemporaryGrant) -> dict[str, Any]:
    return {
        "permission_id": str(g.permission_id),
        "expires_at": g.expires_at.isoformat(),
        "granted_at": g.granted_at.isoformat(),
        "granted_by": g.granted_by,
        "reason": g.reason,
    }


def override_to_dict(o: ResourceOverride) -> dict[str, Any]:
    return {
        "resource_type": o.resource_type,
        "resource_id": o.resource_id,
        "granted": sorted(str(pid) for pid in o.granted),
        "denied": sorted(str(pid) for pid in o.denied),
        "expires_at": o.expires_at.isoformat() if o.expires_at else None,
        "assigned_at": o.assigned_at.isoformat(),
        "assigned_by": o.assigned_by,
    }
