from __future__ import annotations

import logging

import jwt
from jwt import PyJWKClient

from messaging_hub.application.dto.principal import TokenClaims
from messaging_hub.application.exceptions import AuthenticationError
from messaging_hub.infrastructure.auth.claims import claims_from_payload

logger = logging.getLogger(__name__)


class JWKSVerifier:
    """Verify JWTs using a remote JWKS endpoint."""

    def __init__(self, jwks_url: str) -> None:
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> TokenClaims:
        try:
            signing_key = self._jwk_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256", "ES256"],
            )
        except jwt.PyJWKClientError as exc:
            logger.warning("JWKS lookup failed against %s: %s", self._jwks_url, exc)
            raise AuthenticationError("Invalid token") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        return claims_from_payload(payload)
