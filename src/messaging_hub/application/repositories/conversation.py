from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from messaging_hub.domain.entities.conversation import Conversation, ConversationSummary


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_case(self, case_id: UUID) -> Conversation | None: ...

    async def list_for_user(self, user_id: UUID) -> list[ConversationSummary]:
        """Conversations the user owns/handles a case for or has posted in, newest activity first."""
        ...

    async def list_ids_for_user(self, user_id: UUID) -> list[UUID]: ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation: ...

    async def touch(self, conversation_id: UUID, ts: datetime) -> None:
        """Bump the last-activity timestamp."""
        ...
