"""Health endpoint tests."""

from falcon.asgi import App
from falcon.testing import TestClient

from grantwise import __version__
from grantwise.interfaces.api.resources.health import HealthResource


def _client(readiness_check=None) -> TestClient:
    app = App()
    health = HealthResource(readiness_check)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    return TestClient(app)


def test_liveness_reports_version() -> None:
    result = _client().simulate_get("/v1/health")
    assert result.status_code == 200
    assert result.json == {"status": "ok", "version": __version__}


def test_ready_without_probe() -> None:
    result = _client().simulate_get("/v1/health/ready")
    assert result.status_code == 200
    assert result.json == {"status": "ready"}


def test_ready_when_database_answers() -> None:
    async def healthy() -> bool:
        return True

    assert _client(healthy).simulate_get("/v1/health/ready").status_code == 200


def test_not_ready_when_database_unreachable() -> None:
    async def unreachable() -> bool:
        return False

    result = _client(unreachable).simulate_get("/v1/health/ready")
    # liveness stays green while the database is down
    assert result.status_code == 503
    assert result.json == {"status": "unavailable"}
    assert _client(unreachable).simulate_get("/v1/health").status_code == 200
