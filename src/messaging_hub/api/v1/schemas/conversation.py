from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from messaging_hub.infrastructure.ws.protocol import CamelModel


class CreateConversationRequest(CamelModel):
    title: str | None = Field(default=None, max_length=255)
    case_id: UUID | None = None
    participants: list[UUID] = []


class ConversationResponse(CamelModel):
    id: UUID
    case_id: UUID | None
    title: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConversationSummaryResponse(ConversationResponse):
    display_title: str | None
    unread_count: int
    last_message_at: datetime | None
