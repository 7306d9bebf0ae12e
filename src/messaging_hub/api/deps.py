"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import AuthenticationError
from messaging_hub.application.ports.auth import TokenVerifier
from messaging_hub.application.uow import UoWFactory
from messaging_hub.config import settings
from messaging_hub.infrastructure.auth.hs256_verifier import HS256Verifier
from messaging_hub.infrastructure.auth.jwks_verifier import JWKSVerifier
from messaging_hub.infrastructure.db.session import AsyncSessionLocal
from messaging_hub.infrastructure.db.uow import SqlAlchemyUoW
from messaging_hub.infrastructure.ws.manager import ConnectionManager
from messaging_hub.services import identity_service

_bearer_scheme = HTTPBearer(auto_error=False)


@asynccontextmanager
async def open_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        async with SqlAlchemyUoW(session) as uow:
            yield uow


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with open_uow() as uow:
        yield uow


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


def get_uow_factory() -> UoWFactory:
    """Per-event units of work for the WebSocket read loop."""
    return open_uow


UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


VerifierDep = Annotated[TokenVerifier, Depends(get_verifier)]


def get_hub(conn: HTTPConnection) -> ConnectionManager:
    return conn.app.state.hub


HubDep = Annotated[ConnectionManager, Depends(get_hub)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
    verifier: VerifierDep,
    uow: UoWDep,
) -> Principal:
    token = credentials.credentials if credentials is not None else None
    try:
        return await identity_service.authenticate(token, verifier, uow)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
