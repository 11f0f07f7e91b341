"""Application entry point and composition root."""

import logging
from functools import partial

import uvicorn
from falcon.asgi import App

from grantwise import __version__
from grantwise.application.use_cases.catalog.seed_catalog import SeedCatalogUseCase
from grantwise.config import Settings, get_settings
from grantwise.infrastructure.audit.logging_audit_sink import LoggingAuditSink
from grantwise.infrastructure.auth.keycloak_provider import KeycloakProvider
from grantwise.infrastructure.cache.in_memory_decision_cache import InMemoryDecisionCache
from grantwise.infrastructure.persistence.postgres.connection import create_pool, ping
from grantwise.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from grantwise.infrastructure.resources.postgres_resource_store import PostgresResourceStore
from grantwise.infrastructure.resources.timeout_resource_store import TimeoutResourceStore
from grantwise.interfaces.api.app import create_app
from grantwise.interfaces.api.middleware.auth import AuthMiddleware
from grantwise.interfaces.api.middleware.cors import CORSMiddleware
from grantwise.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_grantwise_app(settings: Settings | None = None) -> App:
    """Composition root - build the Falcon app with postgres-backed adapters."""
    settings = settings or get_settings()
    pool = create_pool(
        settings.database_url,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size,
    )
    uow_factory = create_uow_factory(pool)
    cache = InMemoryDecisionCache(max_entries=settings.decision_cache_max_entries)
    resource_store = TimeoutResourceStore(
        PostgresResourceStore(pool, settings.resource_tables),
        timeout=settings.resource_fetch_timeout_seconds,
    )
    audit_sink = LoggingAuditSink()

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("Keycloak client secret not set; every authenticated route will answer 401")

    seed_catalog = SeedCatalogUseCase(
        uow_factory, cache, invalidation_attempts=settings.cache_invalidation_retries
    )
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return create_app(
        uow_factory,
        cache,
        resource_store,
        audit_sink,
        settings,
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool, seed_catalog),
            AuthMiddleware(keycloak),
        ],
        readiness_check=partial(ping, pool),
    )


def main() -> None:
    """CLI entry point - run the API server with uvicorn."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Grantwise v%s starting (%s)", __version__, settings.environment)
    uvicorn.run(create_grantwise_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
