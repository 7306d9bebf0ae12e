from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_hub.application.dto.effects import Effect, RoomBroadcast
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import AccessDeniedError, PersistenceError
from messaging_hub.application.policies.permissions import assert_conversation_access
from messaging_hub.application.ports.realtime import RoomDirectory, TypingState
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.events.signals import ReadReceipt, TypingSignal
from messaging_hub.domain.value_objects.enums import OutboundEvent

logger = logging.getLogger(__name__)


async def persist_read_mark(
    conversation_id: uuid.UUID,
    reader_id: uuid.UUID,
    uow: UnitOfWork,
) -> int:
    try:
        count = await uow.messages_w.mark_read(conversation_id, reader_id)
        await uow.commit()
    except Exception as exc:
        await uow.rollback()
        logger.exception("mark_read failed for conversation %s", conversation_id)
        raise PersistenceError("Failed to mark messages as read") from exc
    return count


def read_receipt_broadcast(
    conversation_id: uuid.UUID,
    reader_id: uuid.UUID,
    *,
    include_reader: bool,
) -> RoomBroadcast:
    receipt = ReadReceipt(
        conversation_id=conversation_id,
        user_id=reader_id,
        timestamp=datetime.now(timezone.utc),
    )
    return RoomBroadcast(
        conversation_id,
        OutboundEvent.MESSAGES_READ,
        receipt,
        exclude_user_id=None if include_reader else reader_id,
    )


async def mark_read(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    *,
    include_reader: bool = False,
) -> tuple[int, list[Effect]]:
    """Mark everything the reader did not send as read.

    The WebSocket path tells the rest of the room; the HTTP path
    (``include_reader=True``) tells the whole room, reader included.
    """
    await assert_conversation_access(principal, conversation_id, uow)
    count = await persist_read_mark(conversation_id, principal.user_id, uow)
    effects: list[Effect] = [
        read_receipt_broadcast(conversation_id, principal.user_id, include_reader=include_reader),
    ]
    return count, effects


def set_typing(
    conversation_id: uuid.UUID,
    principal: Principal,
    is_typing: bool,
    rooms: RoomDirectory,
    typing: TypingState,
) -> list[Effect]:
    """Relay a typing signal to the rest of the room. Fire-and-forget."""
    if not rooms.is_subscribed(principal.user_id, conversation_id):
        raise AccessDeniedError("Not subscribed to conversation")

    if is_typing:
        typing.start(conversation_id, principal.user_id)
    else:
        typing.stop(conversation_id, principal.user_id)

    signal = TypingSignal(
        conversation_id=conversation_id,
        user_id=principal.user_id,
        is_typing=is_typing,
        timestamp=datetime.now(timezone.utc),
    )
    return [
        RoomBroadcast(
            conversation_id,
            OutboundEvent.TYPING_INDICATOR,
            signal,
            exclude_user_id=principal.user_id,
        )
    ]
