from __future__ import annotations

from uuid import UUID

from messaging_hub.domain.value_objects.enums import ContentType
from messaging_hub.infrastructure.ws.protocol import CamelModel, MessageOut

MessageResponse = MessageOut


class SendMessageRequest(CamelModel):
    content: str
    content_type: ContentType = ContentType.TEXT
    attachments: list[UUID] = []


class MarkReadResponse(CamelModel):
    count: int
    message: str


class UnreadCountResponse(CamelModel):
    unread_count: int


class DeleteMessageResponse(CamelModel):
    message: str
