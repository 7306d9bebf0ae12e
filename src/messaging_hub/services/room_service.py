from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_hub.application.dto.effects import Effect, Reply
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.policies.permissions import assert_conversation_access
from messaging_hub.application.ports.realtime import RoomDirectory, TypingState
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.events.signals import TypingSignal
from messaging_hub.domain.value_objects.enums import OutboundEvent
from messaging_hub.services.read_state_service import persist_read_mark, read_receipt_broadcast

logger = logging.getLogger(__name__)


async def join_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    rooms: RoomDirectory,
    uow: UnitOfWork,
    typing: TypingState | None = None,
) -> list[Effect]:
    """Subscribe the principal's connection to the room.

    Joining marks the conversation read and tells the rest of the room.
    Re-joining is harmless: membership stays the same, the read-mark repeats.
    """
    await assert_conversation_access(principal, conversation_id, uow)
    await persist_read_mark(conversation_id, principal.user_id, uow)

    if not await rooms.join(principal.user_id, conversation_id):
        logger.warning("Join of %s by %s without a live connection", conversation_id, principal.user_id)
        return []
    logger.info("User %s joined conversation %s", principal.user_id, conversation_id)

    effects: list[Effect] = [
        read_receipt_broadcast(conversation_id, principal.user_id, include_reader=False),
    ]
    if typing is not None:
        now = datetime.now(timezone.utc)
        for user_id in typing.active(conversation_id):
            if user_id == principal.user_id:
                continue
            effects.append(
                Reply(
                    OutboundEvent.TYPING_INDICATOR,
                    TypingSignal(conversation_id, user_id, True, now),
                )
            )
    return effects


async def leave_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    rooms: RoomDirectory,
    typing: TypingState | None = None,
) -> bool:
    left = await rooms.leave(principal.user_id, conversation_id)
    if typing is not None:
        typing.stop(conversation_id, principal.user_id)
    if left:
        logger.info("User %s left conversation %s", principal.user_id, conversation_id)
    return left


async def resubscribe(
    principal: Principal,
    rooms: RoomDirectory,
    uow: UnitOfWork,
) -> list[uuid.UUID]:
    """Restore room membership for a fresh connection."""
    joined: list[uuid.UUID] = []
    for conversation_id in await uow.conversations.list_ids_for_user(principal.user_id):
        if await rooms.join(principal.user_id, conversation_id):
            joined.append(conversation_id)
    logger.debug("User %s resubscribed to %d conversations", principal.user_id, len(joined))
    return joined
