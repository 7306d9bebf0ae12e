from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from messaging_hub.application.dto.effects import Effect, Notify, RoomBroadcast
from messaging_hub.application.dto.message import MessageDraft
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import NotFoundError, PersistenceError, ValidationError
from messaging_hub.application.policies.permissions import assert_conversation_access
from messaging_hub.application.ports.clock import Clock, system_clock
from messaging_hub.application.ports.realtime import RoomDirectory, TypingState
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.entities.conversation import Conversation
from messaging_hub.domain.entities.message import Message, Sender
from messaging_hub.domain.events.notifications import Actor
from messaging_hub.domain.value_objects.enums import ContentType, OutboundEvent, SenderKind
from messaging_hub.services import notification_service

logger = logging.getLogger(__name__)

REDACTED_CONTENT = "[Message has been redacted]"
DELETE_WINDOW = timedelta(minutes=5)


async def _persist(
    conversation_id: uuid.UUID,
    sender_id: uuid.UUID,
    sender_kind: SenderKind,
    draft: MessageDraft,
    uow: UnitOfWork,
) -> Message:
    now = datetime.now(timezone.utc)
    message = Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        sender_kind=sender_kind.value,
        content=draft.content,
        content_type=draft.content_type,
        is_read=sender_kind == SenderKind.SYSTEM,
        created_at=now,
    )
    try:
        stored = await uow.messages_w.create(message, draft.attachment_ids)
        await uow.conversations_w.touch(conversation_id, now)
        await uow.commit()
    except Exception as exc:
        await uow.rollback()
        logger.exception("Persisting message into %s failed", conversation_id)
        raise PersistenceError("Failed to send message") from exc
    return stored


async def _notification_effects(
    conversation: Conversation,
    message: Message,
    sender: Actor,
    rooms: RoomDirectory,
    uow: UnitOfWork,
) -> list[Effect]:
    try:
        targets = await notification_service.message_recipients(
            conversation, message.sender_id, rooms, uow,
        )
    except Exception:
        logger.exception("Resolving notification targets for %s failed", conversation.id)
        return []
    if not targets:
        return []
    return [Notify(targets, notification_service.new_message_notification(message, sender))]


async def send_message(
    conversation_id: uuid.UUID,
    principal: Principal,
    draft: MessageDraft,
    rooms: RoomDirectory,
    uow: UnitOfWork,
    typing: TypingState | None = None,
) -> tuple[Message, list[Effect]]:
    """Persist a message and describe who has to hear about it.

    The room gets ``new_message`` (sender included). Authorized users who are
    not in the room get a ``new_message`` notification instead.
    """
    if not draft.content or not draft.content.strip():
        raise ValidationError("Message content is required")

    conversation = await assert_conversation_access(principal, conversation_id, uow)
    message = await _persist(conversation_id, principal.user_id, principal.sender_kind, draft, uow)
    message = replace(
        message,
        sender=Sender(
            id=principal.user_id,
            display_name=principal.display_name,
            role=principal.role.value,
        ),
    )

    if typing is not None:
        typing.stop(conversation_id, principal.user_id)

    effects: list[Effect] = [RoomBroadcast(conversation_id, OutboundEvent.NEW_MESSAGE, message)]
    effects.extend(
        await _notification_effects(
            conversation, message, notification_service.actor_of(principal), rooms, uow,
        )
    )
    return message, effects


async def post_system_message(
    conversation_id: uuid.UUID,
    actor: Actor,
    content: str,
    uow: UnitOfWork,
    attachment_ids: tuple[uuid.UUID, ...] = (),
) -> tuple[Message, list[Effect]]:
    """Write a system line (status change, upload...) into a conversation.

    System messages are born read and only go to the room.
    """
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")

    draft = MessageDraft(content=content, attachment_ids=attachment_ids)
    message = await _persist(conversation_id, actor.id, SenderKind.SYSTEM, draft, uow)
    message = replace(
        message,
        sender=Sender(id=actor.id, display_name=actor.name, role=actor.role or SenderKind.SYSTEM.value),
    )
    return message, [RoomBroadcast(conversation_id, OutboundEvent.NEW_MESSAGE, message)]


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    page: int,
    page_size: int,
    uow: UnitOfWork,
) -> list[Message]:
    await assert_conversation_access(principal, conversation_id, uow)
    return await uow.messages.list_messages(
        conversation_id, offset=(page - 1) * page_size, limit=page_size,
    )


async def delete_or_redact(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    clock: Clock = system_clock,
) -> bool:
    """Hard-delete a fresh message, redact an older one.

    Returns False when the message does not exist or belongs to someone else.
    """
    message = await uow.messages.get_by_id(message_id)
    if message is None or message.sender_id != principal.user_id:
        return False

    age = clock.now() - message.created_at
    try:
        if age < DELETE_WINDOW:
            await uow.messages_w.delete(message_id)
        else:
            await uow.messages_w.redact(message_id, REDACTED_CONTENT, ContentType.TEXT)
        await uow.commit()
    except Exception as exc:
        await uow.rollback()
        logger.exception("Deleting message %s failed", message_id)
        raise PersistenceError("Failed to delete message") from exc

    logger.info("Message %s %s", message_id, "deleted" if age < DELETE_WINDOW else "redacted")
    return True


async def unread_count(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.messages.count_unread_for_user(principal.user_id)
