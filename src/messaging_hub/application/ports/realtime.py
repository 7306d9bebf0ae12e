from __future__ import annotations

from typing import Protocol
from uuid import UUID


class RoomDirectory(Protocol):
    """Room membership view consumed by the services.

    Implemented by ``SessionRegistry``; services never see sockets.
    """

    def is_connected(self, user_id: UUID) -> bool: ...

    def is_subscribed(self, user_id: UUID, conversation_id: UUID) -> bool: ...

    def subscribed_user_ids(self, conversation_id: UUID) -> set[UUID]: ...

    async def join(self, user_id: UUID, conversation_id: UUID) -> bool:
        """Add the user's live connection to the room. False if not connected."""
        ...

    async def leave(self, user_id: UUID, conversation_id: UUID) -> bool: ...


class TypingState(Protocol):
    def start(self, conversation_id: UUID, user_id: UUID) -> None: ...

    def stop(self, conversation_id: UUID, user_id: UUID) -> None: ...

    def active(self, conversation_id: UUID) -> list[UUID]: ...

    def forget_user(self, user_id: UUID) -> None: ...
