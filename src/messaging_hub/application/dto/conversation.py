from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ConversationDraft:
    participant_ids: tuple[UUID, ...]
    title: str | None = None
    case_id: UUID | None = None
