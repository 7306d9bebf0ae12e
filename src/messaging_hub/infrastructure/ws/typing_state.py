from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from messaging_hub.application.ports.clock import Clock, system_clock

TYPING_TTL = timedelta(seconds=3)


class TypingTracker:
    """Who is typing where. Entries lapse after ``ttl`` without a refresh."""

    def __init__(self, ttl: timedelta = TYPING_TTL, clock: Clock = system_clock) -> None:
        self._ttl = ttl
        self._clock = clock
        self._expires: dict[tuple[UUID, UUID], datetime] = {}

    def start(self, conversation_id: UUID, user_id: UUID) -> None:
        self._expires[(conversation_id, user_id)] = self._clock.now() + self._ttl

    def stop(self, conversation_id: UUID, user_id: UUID) -> None:
        self._expires.pop((conversation_id, user_id), None)

    def active(self, conversation_id: UUID) -> list[UUID]:
        now = self._clock.now()
        self._expires = {k: exp for k, exp in self._expires.items() if exp > now}
        return [uid for (cid, uid) in self._expires if cid == conversation_id]

    def forget_user(self, user_id: UUID) -> None:
        self._expires = {k: exp for k, exp in self._expires.items() if k[1] != user_id}

    def clear(self) -> None:
        self._expires.clear()
