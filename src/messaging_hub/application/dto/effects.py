"""Side effects returned by services and applied by the connection manager.

Services never touch sockets. They return a list of these values once their
unit of work has committed; the caller hands the list to
``ConnectionManager.apply``.
"""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from messaging_hub.domain.entities.message import Message
from messaging_hub.domain.events.notifications import Envelope
from messaging_hub.domain.events.signals import ReadReceipt, TypingSignal
from messaging_hub.domain.value_objects.enums import OutboundEvent

Payload = Message | ReadReceipt | TypingSignal | None


@dataclass(frozen=True, slots=True)
class RoomBroadcast:
    conversation_id: UUID
    event: OutboundEvent
    payload: Payload
    exclude_user_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class Reply:
    """Frame for the connection that originated the event."""

    event: OutboundEvent
    payload: Payload


@dataclass(frozen=True, slots=True)
class Notify:
    targets: frozenset[UUID]
    envelope: Envelope


Effect = RoomBroadcast | Reply | Notify
