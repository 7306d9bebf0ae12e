from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Protocol

from messaging_hub.application.repositories.case import CaseReader
from messaging_hub.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from messaging_hub.application.repositories.message import MessageReader, MessageWriter
from messaging_hub.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    cases: CaseReader
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...


# Opens a fresh unit of work per inbound WS event or bus event.
UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]
