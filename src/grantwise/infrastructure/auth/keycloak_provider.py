"""Keycloak OIDC provider - resolves bearer tokens to callers."""

import logging
from dataclasses import dataclass, field
from typing import Any

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = logging.getLogger(__name__)


@dataclass
class OIDCUser:
    """Caller identified by an active access token.

    ``user_id`` is the token subject and matches the identity store key.
    """

    user_id: str
    email: str | None = None
    username: str | None = None
    realm_roles: list[str] = field(default_factory=list)

    @classmethod
    def from_introspection(cls, claims: dict[str, Any]) -> "OIDCUser | None":
        """Build from an introspection response; inactive or subject-less tokens yield None."""
        subject = claims.get("sub")
        if not claims.get("active") or not subject:
            return None
        return cls(
            user_id=subject,
            email=claims.get("email"),
            username=claims.get("preferred_username"),
            realm_roles=list(claims.get("realm_access", {}).get("roles", [])),
        )


class KeycloakProvider:
    """Token introspection against one Keycloak realm and confidential client."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
    ) -> None:
        self._realm = realm
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )

    def decode_token(self, token: str) -> OIDCUser | None:
        try:
            claims = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection against realm %s failed: %s", self._realm, e)
            return None
        return OIDCUser.from_introspection(claims)
