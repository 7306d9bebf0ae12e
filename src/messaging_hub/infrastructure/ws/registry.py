"""Process-local session registry.

Maps each identity to at most one live connection and each conversation room
to the connections subscribed to it. Mutations are serialized with an
``asyncio.Lock``; readers get snapshots, so a broadcast never iterates a set
that a concurrent join/leave is modifying.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from messaging_hub.application.dto.principal import Principal

logger = logging.getLogger(__name__)


class Socket(Protocol):
    async def accept(self) -> None: ...

    async def send_text(self, data: str) -> None: ...


@dataclass(eq=False)
class Connection:
    socket: Socket
    principal: Principal
    rooms: set[UUID] = field(default_factory=set)

    @property
    def user_id(self) -> UUID:
        return self.principal.user_id


class SessionRegistry:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._by_user: dict[UUID, Connection] = {}
        self._rooms: dict[UUID, set[Connection]] = {}

    async def register(self, connection: Connection) -> Connection | None:
        """Record ``connection`` as the identity's live connection.

        Returns the superseded connection, if any. It is detached from its
        rooms but not closed; its next failed send drops it for good.
        """
        async with self._lock:
            previous = self._by_user.get(connection.user_id)
            if previous is connection:
                return None
            if previous is not None:
                self._detach(previous)
            self._by_user[connection.user_id] = connection
        return previous

    async def unregister(self, user_id: UUID, connection: Connection | None = None) -> bool:
        """Remove the identity and its room subscriptions.

        When ``connection`` is given but has already been superseded, only the
        stale connection's leftovers are cleared and the successor stays.
        """
        async with self._lock:
            current = self._by_user.get(user_id)
            if connection is not None and current is not connection:
                self._detach(connection)
                return False
            if current is None:
                return False
            self._detach(current)
            del self._by_user[user_id]
        return True

    async def join(self, user_id: UUID, conversation_id: UUID) -> bool:
        async with self._lock:
            connection = self._by_user.get(user_id)
            if connection is None:
                return False
            connection.rooms.add(conversation_id)
            self._rooms.setdefault(conversation_id, set()).add(connection)
        return True

    async def leave(self, user_id: UUID, conversation_id: UUID) -> bool:
        async with self._lock:
            connection = self._by_user.get(user_id)
            if connection is None or conversation_id not in connection.rooms:
                return False
            connection.rooms.discard(conversation_id)
            self._discard_member(conversation_id, connection)
        return True

    async def clear(self) -> None:
        async with self._lock:
            for connection in self._by_user.values():
                connection.rooms.clear()
            self._by_user.clear()
            self._rooms.clear()

    def resolve(self, user_id: UUID) -> Connection | None:
        return self._by_user.get(user_id)

    def is_connected(self, user_id: UUID) -> bool:
        return user_id in self._by_user

    def is_subscribed(self, user_id: UUID, conversation_id: UUID) -> bool:
        connection = self._by_user.get(user_id)
        return connection is not None and conversation_id in connection.rooms

    def subscribed_user_ids(self, conversation_id: UUID) -> set[UUID]:
        return {c.user_id for c in self._rooms.get(conversation_id, ())}

    def room_members(self, conversation_id: UUID) -> list[Connection]:
        return list(self._rooms.get(conversation_id, ()))

    def rooms_of(self, user_id: UUID) -> frozenset[UUID]:
        connection = self._by_user.get(user_id)
        return frozenset(connection.rooms) if connection else frozenset()

    @property
    def connection_count(self) -> int:
        return len(self._by_user)

    def _detach(self, connection: Connection) -> None:
        for conversation_id in connection.rooms:
            self._discard_member(conversation_id, connection)
        connection.rooms.clear()

    def _discard_member(self, conversation_id: UUID, connection: Connection) -> None:
        members = self._rooms.get(conversation_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._rooms[conversation_id]
