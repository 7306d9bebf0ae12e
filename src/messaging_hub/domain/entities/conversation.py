from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    case_id: UUID | None
    title: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_case_conversation(self) -> bool:
        return self.case_id is not None


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """Conversation row as seen by one viewer."""

    conversation: Conversation
    display_title: str | None
    unread_count: int
    last_message_at: datetime | None
