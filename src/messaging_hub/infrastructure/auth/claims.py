from __future__ import annotations

from typing import Any
from uuid import UUID

from messaging_hub.application.dto.principal import TokenClaims
from messaging_hub.application.exceptions import AuthenticationError


def claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    """Tokens issued by the auth service carry the user id in ``sub`` or ``id``."""
    raw = payload.get("sub") or payload.get("id")
    if raw is None:
        raise AuthenticationError("Token has no subject")
    try:
        return TokenClaims(user_id=UUID(str(raw)))
    except ValueError as exc:
        raise AuthenticationError("Token subject is not a user id") from exc
