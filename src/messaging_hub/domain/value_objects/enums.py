from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    USER = "user"
    SPECIALIST = "specialist"
    ADMIN = "admin"


class SenderKind(StrEnum):
    USER = "user"
    SPECIALIST = "specialist"
    SYSTEM = "system"


class ContentType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"


class OutboundEvent(StrEnum):
    """Server -> client frame types."""

    NEW_MESSAGE = "new_message"
    MESSAGES_READ = "messages_read"
    TYPING_INDICATOR = "typing_indicator"
    NOTIFICATION = "notification"
    ERROR = "error"
    PONG = "pong"


class NotificationKind(StrEnum):
    NEW_MESSAGE = "new_message"
    CASE_UPDATE = "case_update"
    NEW_CONVERSATION = "new_conversation"
