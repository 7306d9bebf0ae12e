"""Inbound WebSocket event handlers.

Each frame type maps to one handler. Handlers open their own unit of work,
call a service and return the effects for the connection manager to apply.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from messaging_hub.application.dto.effects import Effect, Reply
from messaging_hub.application.dto.message import MessageDraft
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.uow import UoWFactory
from messaging_hub.domain.value_objects.enums import OutboundEvent
from messaging_hub.infrastructure.ws.manager import ConnectionManager
from messaging_hub.infrastructure.ws.protocol import (
    ConversationRef,
    SendMessagePayload,
    TypingPayload,
)
from messaging_hub.infrastructure.ws.registry import Connection
from messaging_hub.services import message_service, read_state_service, room_service


@dataclass(frozen=True, slots=True)
class WsContext:
    connection: Connection
    hub: ConnectionManager
    uow_factory: UoWFactory

    @property
    def principal(self) -> Principal:
        return self.connection.principal


Handler = Callable[[WsContext, Any], Awaitable[list[Effect]]]


async def join_conversation(ctx: WsContext, data: Any) -> list[Effect]:
    ref = ConversationRef.model_validate(data)
    async with ctx.uow_factory() as uow:
        return await room_service.join_conversation(
            ref.conversation_id, ctx.principal, ctx.hub.registry, uow, ctx.hub.typing,
        )


async def leave_conversation(ctx: WsContext, data: Any) -> list[Effect]:
    ref = ConversationRef.model_validate(data)
    await room_service.leave_conversation(
        ref.conversation_id, ctx.principal, ctx.hub.registry, ctx.hub.typing,
    )
    return []


async def send_message(ctx: WsContext, data: Any) -> list[Effect]:
    payload = SendMessagePayload.model_validate(data)
    draft = MessageDraft(
        content=payload.content,
        content_type=payload.content_type,
        attachment_ids=tuple(payload.attachments),
    )
    async with ctx.uow_factory() as uow:
        _message, effects = await message_service.send_message(
            payload.conversation_id, ctx.principal, draft, ctx.hub.registry, uow,
            typing=ctx.hub.typing,
        )
    return effects


async def read_messages(ctx: WsContext, data: Any) -> list[Effect]:
    ref = ConversationRef.model_validate(data)
    async with ctx.uow_factory() as uow:
        _count, effects = await read_state_service.mark_read(
            ref.conversation_id, ctx.principal, uow,
        )
    return effects


async def typing(ctx: WsContext, data: Any) -> list[Effect]:
    payload = TypingPayload.model_validate(data)
    return read_state_service.set_typing(
        payload.conversation_id, ctx.principal, payload.is_typing, ctx.hub.registry, ctx.hub.typing,
    )


async def ping(ctx: WsContext, data: Any) -> list[Effect]:
    return [Reply(OutboundEvent.PONG, None)]


HANDLERS: dict[str, Handler] = {
    "join_conversation": join_conversation,
    "leave_conversation": leave_conversation,
    "send_message": send_message,
    "read_messages": read_messages,
    "typing": typing,
    "ping": ping,
}
