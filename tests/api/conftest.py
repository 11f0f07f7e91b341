"""Fixtures for API tests."""

import falcon.asgi
import pytest
from falcon.testing import TestClient

from grantwise.config import Settings
from grantwise.domain.entities import Role
from grantwise.interfaces.api.app import create_app
from grantwise.interfaces.api.middleware.auth import RequestUser

from tests.conftest import World

ADMIN_ID = "admin-1"
SETTINGS_ADMIN_ID = "root-1"
PLAIN_ID = "user-1"


class AuthBypassMiddleware:
    """Middleware that takes the caller from the X-Test-User header."""

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user_id = req.get_header("X-Test-User")
        req.context.user = RequestUser(user_id=user_id) if user_id else None


@pytest.fixture
def api_world(world: World) -> World:
    """World with a permission admin, a settings admin and a plain operator."""
    admin = world.role("admin", ["user:update:permission"], is_system=True)
    root = world.role(
        "platform_admin", ["user:update:permission", "admin:system:settings"], is_system=True
    )
    operator = world.role("operator", ["customer:read", "report:create"], is_system=True)
    world.user(ADMIN_ID, admin)
    world.user(SETTINGS_ADMIN_ID, root)
    world.user(PLAIN_ID, operator, customerId="C-1")
    return world


@pytest.fixture
def operator_role(api_world: World) -> Role:
    return next(r for r in api_world.uow.roles._by_id.values() if r.name == "operator")


@pytest.fixture
def app(api_world: World):
    """Falcon ASGI app wired to the in-memory world."""
    return create_app(
        api_world.uow_factory,
        api_world.cache,
        api_world.resources,
        api_world.audit,
        Settings(_env_file=None),
        middleware=[AuthBypassMiddleware()],
    )


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)


def as_user(user_id: str) -> dict[str, str]:
    return {"X-Test-User": user_id}
