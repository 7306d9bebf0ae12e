from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_hub.application.dto.conversation import ConversationDraft
from messaging_hub.application.dto.effects import Effect, Notify
from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import (
    AccessDeniedError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from messaging_hub.application.policies.permissions import assert_conversation_access
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.entities.conversation import Conversation, ConversationSummary
from messaging_hub.domain.entities.message import Message
from messaging_hub.domain.value_objects.enums import ContentType, SenderKind
from messaging_hub.services import notification_service

logger = logging.getLogger(__name__)


def _system_line(
    conversation_id: uuid.UUID,
    author_id: uuid.UUID,
    content: str,
    created_at: datetime,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=author_id,
        sender_kind=SenderKind.SYSTEM.value,
        content=content,
        content_type=ContentType.TEXT,
        is_read=True,
        created_at=created_at,
    )


async def create_conversation(
    draft: ConversationDraft,
    principal: Principal,
    uow: UnitOfWork,
) -> tuple[Conversation, list[Effect]]:
    """Open a conversation between the creator and ``draft.participant_ids``.

    Free-form conversations authorize by participation history, so every
    participant gets a system line attributed to them.
    """
    participant_ids = list(dict.fromkeys([principal.user_id, *draft.participant_ids]))
    users = {user.id: user for user in await uow.users.get_many(participant_ids)}
    missing = [str(pid) for pid in participant_ids if pid not in users]
    if missing:
        raise ValidationError(f"Unknown participants: {', '.join(missing)}")

    if draft.case_id is not None:
        case = await uow.cases.get_by_id(draft.case_id)
        if case is None:
            raise NotFoundError("Case not found")
        if not principal.is_admin and principal.user_id not in case.party_ids():
            raise AccessDeniedError("Access denied to case")

    now = datetime.now(timezone.utc)
    conversation = Conversation(
        id=uuid.uuid4(),
        case_id=draft.case_id,
        title=draft.title,
        created_at=now,
        updated_at=now,
    )
    names = ", ".join(users[pid].display_name for pid in participant_ids)
    try:
        conversation = await uow.conversations_w.create(conversation)
        await uow.messages_w.create(
            _system_line(conversation.id, principal.user_id, f"Conversation started with {names}", now)
        )
        if draft.case_id is None:
            for pid in participant_ids:
                if pid == principal.user_id:
                    continue
                await uow.messages_w.create(
                    _system_line(
                        conversation.id, pid, f"{users[pid].display_name} joined the conversation", now,
                    )
                )
        await uow.commit()
    except Exception as exc:
        await uow.rollback()
        logger.exception("Creating conversation failed")
        raise PersistenceError("Failed to create conversation") from exc

    logger.info("Conversation %s created by %s", conversation.id, principal.user_id)

    targets = frozenset(pid for pid in participant_ids if pid != principal.user_id)
    effects: list[Effect] = []
    if targets:
        envelope = notification_service.new_conversation_notification(
            conversation, notification_service.actor_of(principal), now,
        )
        effects.append(Notify(targets, envelope))
    return conversation, effects


async def list_user_conversations(
    principal: Principal,
    uow: UnitOfWork,
) -> list[ConversationSummary]:
    return await uow.conversations.list_for_user(principal.user_id)


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    return await assert_conversation_access(principal, conversation_id, uow)
