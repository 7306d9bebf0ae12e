"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, assert_never
from uuid import UUID

from messaging_hub.application.dto.effects import Effect, Notify, Reply, RoomBroadcast
from messaging_hub.application.dto.principal import Principal
from messaging_hub.domain.events.notifications import Envelope
from messaging_hub.domain.value_objects.enums import OutboundEvent
from messaging_hub.infrastructure.ws.protocol import encode_envelope, encode_payload, frame
from messaging_hub.infrastructure.ws.registry import Connection, SessionRegistry, Socket
from messaging_hub.infrastructure.ws.typing_state import TypingTracker

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the session registry and pushes frames to live connections.

    One instance per process, created in the app lifespan and cleared on
    shutdown.
    """

    def __init__(
        self,
        registry: SessionRegistry | None = None,
        typing: TypingTracker | None = None,
    ) -> None:
        self.registry = registry or SessionRegistry()
        self.typing = typing or TypingTracker()

    async def connect(self, socket: Socket, principal: Principal) -> Connection:
        await socket.accept()
        connection = Connection(socket=socket, principal=principal)
        superseded = await self.registry.register(connection)
        if superseded is not None:
            logger.info("WS superseded previous connection for %s", principal.user_id)
        logger.debug(
            "WS connected: %s (total=%d)", principal.user_id, self.registry.connection_count,
        )
        return connection

    async def disconnect(self, connection: Connection) -> None:
        removed = await self.registry.unregister(connection.user_id, connection)
        if removed:
            self.typing.forget_user(connection.user_id)
        logger.debug("WS disconnected: %s", connection.user_id)

    async def send_event(
        self,
        connection: Connection,
        event: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        try:
            await connection.socket.send_text(frame(event, data))
        except Exception:
            logger.warning("WS send to %s failed, dropping connection", connection.user_id, exc_info=True)
            await self.disconnect(connection)
            return False
        return True

    async def send_error(self, connection: Connection, message: str) -> None:
        await self.send_event(connection, OutboundEvent.ERROR, {"message": message})

    async def broadcast_to_conversation(
        self,
        conversation_id: UUID,
        event: str,
        data: dict[str, Any],
        *,
        exclude_user_id: UUID | None = None,
    ) -> int:
        """Send a frame to every connection subscribed to the room. Returns deliveries."""
        delivered = 0
        for connection in self.registry.room_members(conversation_id):
            if connection.user_id == exclude_user_id:
                continue
            if await self.send_event(connection, event, data):
                delivered += 1
        return delivered

    async def send_to_user(self, user_id: UUID, event: str, data: dict[str, Any]) -> bool:
        connection = self.registry.resolve(user_id)
        if connection is None:
            return False
        return await self.send_event(connection, event, data)

    async def notify(self, targets: Iterable[UUID], envelope: Envelope) -> int:
        """Push ``envelope`` to each connected target; offline targets are skipped."""
        data = encode_envelope(envelope)
        delivered = 0
        for user_id in targets:
            if await self.send_to_user(user_id, OutboundEvent.NOTIFICATION, data):
                delivered += 1
            else:
                logger.debug("Dropped %s notification for offline user %s", envelope.kind, user_id)
        return delivered

    async def apply(self, effects: Iterable[Effect], *, origin: Connection | None = None) -> None:
        for effect in effects:
            match effect:
                case RoomBroadcast():
                    await self.broadcast_to_conversation(
                        effect.conversation_id,
                        effect.event,
                        encode_payload(effect.payload),
                        exclude_user_id=effect.exclude_user_id,
                    )
                case Reply():
                    if origin is not None:
                        await self.send_event(origin, effect.event, encode_payload(effect.payload))
                case Notify():
                    await self.notify(effect.targets, effect.envelope)
                case _:
                    assert_never(effect)

    async def clear(self) -> None:
        await self.registry.clear()
        self.typing.clear()
