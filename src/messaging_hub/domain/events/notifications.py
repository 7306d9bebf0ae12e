"""Notification envelopes pushed to a single identity outside room broadcasts.

The set of envelope kinds is closed: producers build one of the three
dataclasses below and consumers match on the concrete type.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar
from uuid import UUID

from messaging_hub.domain.value_objects.enums import NotificationKind


@dataclass(frozen=True, slots=True)
class Actor:
    id: UUID
    name: str
    role: str | None = None


@dataclass(frozen=True, slots=True)
class FieldChange:
    from_value: str | None
    to_value: str | None


@dataclass(frozen=True, slots=True)
class DocumentRef:
    id: UUID
    file_name: str
    file_type: str | None = None
    document_type: str | None = None


@dataclass(frozen=True, slots=True)
class CaseUpdate:
    type: str  # "update" | "document_added"
    updated_by: Actor
    timestamp: datetime
    status: str | None = None
    status_changed: FieldChange | None = None
    assignment_changed: FieldChange | None = None
    priority_changed: FieldChange | None = None
    document: DocumentRef | None = None


@dataclass(frozen=True, slots=True)
class NewMessageNotification:
    conversation_id: UUID
    message_id: UUID
    preview: str
    sender: Actor
    timestamp: datetime

    kind: ClassVar[NotificationKind] = NotificationKind.NEW_MESSAGE


@dataclass(frozen=True, slots=True)
class CaseUpdateNotification:
    case_id: UUID
    case_number: str
    update: CaseUpdate

    kind: ClassVar[NotificationKind] = NotificationKind.CASE_UPDATE


@dataclass(frozen=True, slots=True)
class NewConversationNotification:
    conversation_id: UUID
    title: str | None
    case_id: UUID | None
    created_by: Actor
    timestamp: datetime

    kind: ClassVar[NotificationKind] = NotificationKind.NEW_CONVERSATION


Envelope = NewMessageNotification | CaseUpdateNotification | NewConversationNotification
