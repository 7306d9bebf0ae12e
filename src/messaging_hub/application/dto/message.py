from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messaging_hub.domain.value_objects.enums import ContentType


@dataclass(frozen=True, slots=True)
class MessageDraft:
    content: str
    content_type: str = ContentType.TEXT
    attachment_ids: tuple[UUID, ...] = ()
