from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Attachment:
    document_id: UUID
    file_name: str
    file_type: str | None = None
    file_url: str | None = None


@dataclass(frozen=True, slots=True)
class Sender:
    id: UUID
    display_name: str
    role: str


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    sender_kind: str
    content: str
    content_type: str
    is_read: bool
    created_at: datetime
    attachments: tuple[Attachment, ...] = ()
    sender: Sender | None = None
