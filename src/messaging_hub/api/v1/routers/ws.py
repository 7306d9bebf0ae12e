from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from messaging_hub.api.deps import HubDep, UoWFactoryDep, VerifierDep
from messaging_hub.api.v1.ws_handlers import HANDLERS, WsContext
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import AppError, AuthenticationError
from messaging_hub.application.ports.auth import TokenVerifier
from messaging_hub.application.uow import UoWFactory
from messaging_hub.config import settings
from messaging_hub.domain.value_objects.enums import OutboundEvent
from messaging_hub.infrastructure.ws.manager import ConnectionManager
from messaging_hub.infrastructure.ws.protocol import WsInbound
from messaging_hub.infrastructure.ws.registry import Connection
from messaging_hub.services import identity_service, room_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001


def _bearer_token(websocket: WebSocket) -> str | None:
    header = websocket.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials
    return None


async def _authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow_factory: UoWFactory,
) -> Principal | None:
    try:
        async with uow_factory() as uow:
            return await identity_service.authenticate(token, verifier, uow)
    except AuthenticationError as exc:
        logger.debug("WS auth failed: %s", exc.detail)
        return None


@router.websocket("/ws")
async def ws_endpoint(
    websocket: WebSocket,
    hub: HubDep,
    verifier: VerifierDep,
    uow_factory: UoWFactoryDep,
    token: str | None = Query(None),
) -> None:
    principal = await _authenticate(token or _bearer_token(websocket), verifier, uow_factory)
    if principal is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    connection = await hub.connect(websocket, principal)
    logger.info("User connected: %s (%s)", principal.user_id, principal.role)

    try:
        async with uow_factory() as uow:
            await room_service.resubscribe(principal, hub.registry, uow)
    except Exception:
        logger.exception("Resubscribing %s failed", principal.user_id)

    ctx = WsContext(connection=connection, hub=hub, uow_factory=uow_factory)
    heartbeat_task = asyncio.create_task(
        _heartbeat(hub, connection), name=f"ws-heartbeat-{principal.user_id}",
    )
    try:
        await _read_loop(websocket, ctx)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.user_id)
    finally:
        await _stop_heartbeat(heartbeat_task)
        await hub.disconnect(connection)
        logger.info("User disconnected: %s", principal.user_id)


async def _heartbeat(hub: ConnectionManager, connection: Connection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        if not await hub.send_event(connection, OutboundEvent.PONG):
            return


async def _stop_heartbeat(task: asyncio.Task[None]) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def _read_loop(ws: WebSocket, ctx: WsContext) -> None:
    hub, connection = ctx.hub, ctx.connection
    while True:
        raw = await ws.receive_text()
        try:
            frame = WsInbound.model_validate_json(raw)
        except PayloadError:
            await hub.send_error(connection, "Invalid payload")
            continue

        handler = HANDLERS.get(frame.type)
        if handler is None:
            await hub.send_error(connection, f"Unknown event: {frame.type}")
            continue

        if hub.registry.resolve(connection.user_id) is not connection:
            await hub.send_error(connection, "Session superseded by a newer connection")
            continue

        try:
            effects = await handler(ctx, frame.data)
        except PayloadError:
            await hub.send_error(connection, "Invalid payload")
            continue
        except AppError as exc:
            await hub.send_error(connection, exc.detail)
            continue
        except Exception:
            logger.exception("WS %s failed for %s", frame.type, connection.user_id)
            await hub.send_error(connection, f"Failed to handle {frame.type}")
            continue

        await hub.apply(effects, origin=connection)
