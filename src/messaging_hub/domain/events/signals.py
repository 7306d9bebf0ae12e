from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ReadReceipt:
    conversation_id: UUID
    user_id: UUID
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class TypingSignal:
    """Ephemeral; never persisted."""

    conversation_id: UUID
    user_id: UUID
    is_typing: bool
    timestamp: datetime
