"""Notification envelopes and recipient selection.

Delivery itself happens in ``ConnectionManager.notify``; this module decides
who should get which envelope.
"""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.policies.permissions import authorized_user_ids
from messaging_hub.application.ports.realtime import RoomDirectory
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.entities.case import Case
from messaging_hub.domain.entities.conversation import Conversation
from messaging_hub.domain.entities.message import Message
from messaging_hub.domain.events.notifications import (
    Actor,
    CaseUpdate,
    CaseUpdateNotification,
    NewConversationNotification,
    NewMessageNotification,
)

PREVIEW_LENGTH = 50


def preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


def actor_of(principal: Principal) -> Actor:
    return Actor(id=principal.user_id, name=principal.display_name, role=principal.role.value)


def new_message_notification(message: Message, sender: Actor) -> NewMessageNotification:
    return NewMessageNotification(
        conversation_id=message.conversation_id,
        message_id=message.id,
        preview=preview(message.content),
        sender=sender,
        timestamp=message.created_at,
    )


def case_update_notification(case: Case, update: CaseUpdate) -> CaseUpdateNotification:
    return CaseUpdateNotification(case_id=case.id, case_number=case.case_number, update=update)


def new_conversation_notification(
    conversation: Conversation,
    created_by: Actor,
    timestamp: datetime,
    *,
    title: str | None = None,
) -> NewConversationNotification:
    return NewConversationNotification(
        conversation_id=conversation.id,
        title=title if title is not None else conversation.title,
        case_id=conversation.case_id,
        created_by=created_by,
        timestamp=timestamp,
    )


async def message_recipients(
    conversation: Conversation,
    actor_id: UUID,
    rooms: RoomDirectory,
    uow: UnitOfWork,
) -> frozenset[UUID]:
    """Authorized identities that did not already get the room broadcast."""
    candidates = await authorized_user_ids(conversation, uow)
    return frozenset(
        user_id
        for user_id in candidates
        if user_id != actor_id and not rooms.is_subscribed(user_id, conversation.id)
    )


def case_recipients(case: Case, actor_id: UUID) -> frozenset[UUID]:
    return frozenset(user_id for user_id in case.party_ids() if user_id != actor_id)
