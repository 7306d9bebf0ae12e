"""Wire models shared by the WebSocket transport and the HTTP fallback.

Frames are ``{"type": ..., "data": ...}``. Payload keys are camelCase on the
way out; inbound payloads accept camelCase or snake_case.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, assert_never
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from messaging_hub.application.dto.effects import Payload
from messaging_hub.domain.entities.message import Message
from messaging_hub.domain.events.notifications import (
    Actor,
    CaseUpdateNotification,
    Envelope,
    FieldChange,
    NewConversationNotification,
    NewMessageNotification,
)
from messaging_hub.domain.events.signals import ReadReceipt, TypingSignal
from messaging_hub.domain.value_objects.enums import ContentType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # join_conversation | leave_conversation | send_message | read_messages | typing | ping
    data: Any = None


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # new_message | messages_read | typing_indicator | notification | error | pong
    data: dict[str, Any] = {}


# --- inbound payloads -------------------------------------------------------


class ConversationRef(CamelModel):
    conversation_id: UUID

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_id(cls, value: Any) -> Any:
        if isinstance(value, (str, UUID)):
            return {"conversation_id": value}
        return value


class SendMessagePayload(CamelModel):
    conversation_id: UUID
    content: str
    content_type: str = ContentType.TEXT
    attachments: list[UUID] = []


class TypingPayload(CamelModel):
    conversation_id: UUID
    is_typing: bool = False


# --- outbound payloads ------------------------------------------------------


class AttachmentOut(CamelModel):
    document_id: UUID
    file_name: str
    file_type: str | None = None
    file_url: str | None = None


class SenderOut(CamelModel):
    id: UUID
    display_name: str
    role: str


class MessageOut(CamelModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_kind: str
    content: str
    content_type: str
    is_read: bool
    created_at: datetime
    attachments: list[AttachmentOut] = []
    sender: SenderOut | None = None


class MessagesReadOut(CamelModel):
    conversation_id: UUID
    user_id: UUID
    timestamp: datetime


class TypingIndicatorOut(CamelModel):
    conversation_id: UUID
    user_id: UUID
    is_typing: bool
    timestamp: datetime


class ActorOut(CamelModel):
    id: UUID
    name: str


class UpdatedByOut(ActorOut):
    role: str | None = None


class FieldChangeOut(CamelModel):
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None


class DocumentOut(CamelModel):
    id: UUID
    file_name: str
    file_type: str | None = None
    document_type: str | None = None


class CaseUpdateOut(CamelModel):
    type: str
    updated_by: UpdatedByOut
    timestamp: datetime
    status: str | None = None
    status_changed: FieldChangeOut | None = None
    assignment_changed: FieldChangeOut | None = None
    priority_changed: FieldChangeOut | None = None
    document: DocumentOut | None = None


class NewMessageNotificationOut(CamelModel):
    type: Literal["new_message"] = "new_message"
    conversation_id: UUID
    message_id: UUID
    preview: str
    sender: ActorOut
    timestamp: datetime


class CaseUpdateNotificationOut(CamelModel):
    type: Literal["case_update"] = "case_update"
    case_id: UUID
    case_number: str
    update: CaseUpdateOut


class ConversationBriefOut(CamelModel):
    id: UUID
    title: str | None = None
    case_id: UUID | None = None


class NewConversationNotificationOut(CamelModel):
    type: Literal["new_conversation"] = "new_conversation"
    conversation: ConversationBriefOut
    created_by: ActorOut
    timestamp: datetime


# --- encoding ---------------------------------------------------------------


def message_out(message: Message) -> MessageOut:
    sender = message.sender
    return MessageOut(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        sender_kind=message.sender_kind,
        content=message.content,
        content_type=message.content_type,
        is_read=message.is_read,
        created_at=message.created_at,
        attachments=[
            AttachmentOut(
                document_id=a.document_id,
                file_name=a.file_name,
                file_type=a.file_type,
                file_url=a.file_url,
            )
            for a in message.attachments
        ],
        sender=(
            SenderOut(id=sender.id, display_name=sender.display_name, role=sender.role)
            if sender is not None
            else None
        ),
    )


def _actor(actor: Actor) -> ActorOut:
    return ActorOut(id=actor.id, name=actor.name)


def _change(change: FieldChange | None) -> FieldChangeOut | None:
    if change is None:
        return None
    return FieldChangeOut(from_=change.from_value, to=change.to_value)


def encode_payload(payload: Payload) -> dict[str, Any]:
    model: BaseModel
    match payload:
        case None:
            return {}
        case Message():
            model = message_out(payload)
        case ReadReceipt():
            model = MessagesReadOut(
                conversation_id=payload.conversation_id,
                user_id=payload.user_id,
                timestamp=payload.timestamp,
            )
        case TypingSignal():
            model = TypingIndicatorOut(
                conversation_id=payload.conversation_id,
                user_id=payload.user_id,
                is_typing=payload.is_typing,
                timestamp=payload.timestamp,
            )
        case _:
            assert_never(payload)
    return model.model_dump(mode="json", by_alias=True)


def encode_envelope(envelope: Envelope) -> dict[str, Any]:
    match envelope:
        case NewMessageNotification():
            return NewMessageNotificationOut(
                conversation_id=envelope.conversation_id,
                message_id=envelope.message_id,
                preview=envelope.preview,
                sender=_actor(envelope.sender),
                timestamp=envelope.timestamp,
            ).model_dump(mode="json", by_alias=True)
        case CaseUpdateNotification():
            update = envelope.update
            document = update.document
            return CaseUpdateNotificationOut(
                case_id=envelope.case_id,
                case_number=envelope.case_number,
                update=CaseUpdateOut(
                    type=update.type,
                    updated_by=UpdatedByOut(
                        id=update.updated_by.id,
                        name=update.updated_by.name,
                        role=update.updated_by.role,
                    ),
                    timestamp=update.timestamp,
                    status=update.status,
                    status_changed=_change(update.status_changed),
                    assignment_changed=_change(update.assignment_changed),
                    priority_changed=_change(update.priority_changed),
                    document=(
                        DocumentOut(
                            id=document.id,
                            file_name=document.file_name,
                            file_type=document.file_type,
                            document_type=document.document_type,
                        )
                        if document is not None
                        else None
                    ),
                ),
            ).model_dump(mode="json", by_alias=True, exclude_none=True)
        case NewConversationNotification():
            return NewConversationNotificationOut(
                conversation=ConversationBriefOut(
                    id=envelope.conversation_id,
                    title=envelope.title,
                    case_id=envelope.case_id,
                ),
                created_by=_actor(envelope.created_by),
                timestamp=envelope.timestamp,
            ).model_dump(mode="json", by_alias=True)
        case _:
            assert_never(envelope)


def frame(event: str, data: dict[str, Any] | None = None) -> str:
    return WsOutbound(type=event, data=data or {}).model_dump_json()
