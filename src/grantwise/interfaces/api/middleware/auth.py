"""Auth middleware - resolves the bearer token to the calling user."""

import logging
from dataclasses import dataclass

import falcon.asgi

from grantwise.infrastructure.auth.keycloak_provider import KeycloakProvider

logger = logging.getLogger(__name__)

_BEARER = "Bearer "


@dataclass
class RequestUser:
    """Caller attached to ``req.context.user``; ``user_id`` is the identity store key."""

    user_id: str
    email: str | None = None
    username: str | None = None


def _bearer_token(req: falcon.asgi.Request) -> str | None:
    header = req.get_header("Authorization") or ""
    if not header.startswith(_BEARER):
        return None
    return header[len(_BEARER) :].strip() or None


class AuthMiddleware:
    """Sets ``req.context.user`` for every request.

    There is no anonymous caller: without a valid token, or without a
    configured provider, the user is None and guarded resources answer 401.
    """

    def __init__(self, keycloak_provider: KeycloakProvider | None = None) -> None:
        self._provider = keycloak_provider

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        req.context.user = None
        token = _bearer_token(req)
        if token is None or self._provider is None:
            return
        oidc_user = self._provider.decode_token(token)
        if oidc_user is None:
            logger.debug("Rejected bearer token on %s %s", req.method, req.path)
            return
        req.context.user = RequestUser(
            user_id=oidc_user.user_id,
            email=oidc_user.email,
            username=oidc_user.username,
        )
