from __future__ import annotations

from typing import Protocol
from uuid import UUID

from messaging_hub.domain.entities.message import Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> list[Message]:
        """Oldest first, with sender and attachments materialized."""
        ...

    async def has_sender(self, conversation_id: UUID, user_id: UUID) -> bool: ...

    async def list_sender_ids(self, conversation_id: UUID) -> set[UUID]: ...

    async def count_unread_for_user(self, user_id: UUID) -> int: ...


class MessageWriter(Protocol):
    async def create(self, message: Message, attachment_ids: tuple[UUID, ...] = ()) -> Message:
        """Insert the row and its attachment links. Returns the stored message with attachments."""
        ...

    async def delete(self, message_id: UUID) -> None: ...

    async def redact(self, message_id: UUID, content: str, content_type: str) -> None: ...

    async def mark_read(self, conversation_id: UUID, reader_id: UUID) -> int:
        """Flip is_read on messages not sent by the reader. Returns affected count."""
        ...
