from __future__ import annotations

import jwt

from messaging_hub.application.dto.principal import TokenClaims
from messaging_hub.application.exceptions import AuthenticationError
from messaging_hub.infrastructure.auth.claims import claims_from_payload


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        return claims_from_payload(payload)
