from __future__ import annotations

from typing import Protocol

from messaging_hub.application.dto.principal import TokenClaims


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> TokenClaims: ...
