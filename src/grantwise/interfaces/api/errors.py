"""Error handlers - map domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from grantwise.domain.exceptions import (
    CacheInvalidationError,
    Conflict,
    GrantwiseError,
    Inactive,
    NotFound,
    PermissionDenied,
    PolicyViolation,
    ResourceFetchTimeout,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[GrantwiseError], str], ...] = (
    (NotFound, falcon.HTTP_404),
    (Inactive, falcon.HTTP_409),
    (Conflict, falcon.HTTP_409),
    (PolicyViolation, falcon.HTTP_403),
    (PermissionDenied, falcon.HTTP_403),
    (ValidationError, falcon.HTTP_400),
    (ResourceFetchTimeout, falcon.HTTP_504),
    (CacheInvalidationError, falcon.HTTP_503),
)


def status_for(error: GrantwiseError) -> str:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return falcon.HTTP_500


async def handle_grantwise_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: GrantwiseError, params
) -> None:
    status = status_for(ex)
    if status in (falcon.HTTP_500, falcon.HTTP_503):
        logger.error("%s %s failed: %s", req.method, req.path, ex, exc_info=ex)
    resp.status = status
    resp.media = {"error": str(ex), "type": type(ex).__name__}


async def handle_unexpected_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}
