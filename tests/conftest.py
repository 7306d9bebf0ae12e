"""Shared test fixtures."""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from types import TracebackType
from typing import Any
from uuid import UUID

import pytest

from messaging_hub.application.dto.principal import Principal
from messaging_hub.domain.entities.case import Case
from messaging_hub.domain.entities.conversation import Conversation, ConversationSummary
from messaging_hub.domain.entities.message import Attachment, Message
from messaging_hub.domain.entities.user import User
from messaging_hub.domain.value_objects.enums import ContentType, Role, SenderKind
from messaging_hub.infrastructure.ws.manager import ConnectionManager


@pytest.fixture
def user_principal() -> Principal:
    return make_principal(Role.USER, "Alice Owner")


@pytest.fixture
def specialist_principal() -> Principal:
    return make_principal(Role.SPECIALIST, "Bob Specialist")


@pytest.fixture
def admin_principal() -> Principal:
    return make_principal(Role.ADMIN, "Carol Admin")


@pytest.fixture
def hub() -> ConnectionManager:
    return ConnectionManager()


def make_principal(role: Role = Role.USER, name: str = "Test User", user_id: UUID | None = None) -> Principal:
    return Principal(user_id=user_id or uuid.uuid4(), role=role, display_name=name)


def user_from(principal: Principal) -> User:
    first, _, last = principal.display_name.partition(" ")
    return User(
        id=principal.user_id,
        email=f"{first.lower()}@example.com",
        first_name=first,
        last_name=last,
        role=principal.role.value,
    )


def make_case(
    *,
    owner_id: UUID,
    assignee_id: UUID | None = None,
    status: str = "open",
    case_number: str = "CASE-0042",
    issue_type: str | None = "Benefits enrollment",
) -> Case:
    return Case(
        id=uuid.uuid4(),
        case_number=case_number,
        owner_id=owner_id,
        assigned_specialist_id=assignee_id,
        status=status,
        priority="normal",
        issue_type=issue_type,
    )


def make_conversation(
    *,
    conversation_id: UUID | None = None,
    case_id: UUID | None = None,
    title: str | None = None,
) -> Conversation:
    now = datetime.now(timezone.utc)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        case_id=case_id,
        title=title,
        created_at=now,
        updated_at=now,
    )


def make_message(
    *,
    conversation_id: UUID,
    sender_id: UUID,
    sender_kind: str = SenderKind.USER,
    content: str = "hello",
    is_read: bool = False,
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        sender_kind=sender_kind,
        content=content,
        content_type=ContentType.TEXT,
        is_read=is_read,
        created_at=created_at or datetime.now(timezone.utc),
    )


@dataclass
class FakeClock:
    current: datetime = field(default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@dataclass
class FakeUserReader:
    _users: dict[UUID, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    async def get_many(self, user_ids: list[UUID]) -> list[User]:
        return [self._users[uid] for uid in user_ids if uid in self._users]

    async def list_ids_by_role(self, role: str) -> list[UUID]:
        return [u.id for u in self._users.values() if u.role == role]


@dataclass
class FakeCaseReader:
    _cases: dict[UUID, Case] = field(default_factory=dict)

    async def get_by_id(self, case_id: UUID) -> Case | None:
        return self._cases.get(case_id)


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)
    _documents: dict[UUID, Attachment] = field(default_factory=dict)
    fail_on_list_senders: bool = False

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return next((m for m in self._messages if m.id == message_id), None)

    async def list_messages(self, conversation_id: UUID, *, offset: int = 0, limit: int = 20) -> list[Message]:
        rows = [m for m in self._messages if m.conversation_id == conversation_id]
        return rows[offset:offset + limit]

    async def has_sender(self, conversation_id: UUID, user_id: UUID) -> bool:
        return any(m.conversation_id == conversation_id and m.sender_id == user_id for m in self._messages)

    async def list_sender_ids(self, conversation_id: UUID) -> set[UUID]:
        if self.fail_on_list_senders:
            raise RuntimeError("database unavailable")
        return {m.sender_id for m in self._messages if m.conversation_id == conversation_id}

    async def count_unread_for_user(self, user_id: UUID) -> int:
        return sum(1 for m in self._messages if m.sender_id != user_id and not m.is_read)


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail_on_create: bool = False

    async def create(self, message: Message, attachment_ids: tuple[UUID, ...] = ()) -> Message:
        if self.fail_on_create:
            raise RuntimeError("database unavailable")
        stored = replace(
            message,
            attachments=tuple(
                self._reader._documents[d] for d in attachment_ids if d in self._reader._documents
            ),
        )
        self._reader._messages.append(stored)
        return stored

    async def delete(self, message_id: UUID) -> None:
        self._reader._messages = [m for m in self._reader._messages if m.id != message_id]

    async def redact(self, message_id: UUID, content: str, content_type: str) -> None:
        self._reader._messages = [
            replace(m, content=content, content_type=content_type) if m.id == message_id else m
            for m in self._reader._messages
        ]

    async def mark_read(self, conversation_id: UUID, reader_id: UUID) -> int:
        count = 0
        updated = []
        for m in self._reader._messages:
            if m.conversation_id == conversation_id and m.sender_id != reader_id and not m.is_read:
                m = replace(m, is_read=True)
                count += 1
            updated.append(m)
        self._reader._messages = updated
        return count


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)
    _cases: FakeCaseReader | None = None
    _messages: FakeMessageReader | None = None

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_by_case(self, case_id: UUID) -> Conversation | None:
        return next((c for c in self._store.values() if c.case_id == case_id), None)

    def _visible(self, conversation: Conversation, user_id: UUID) -> bool:
        assert self._cases is not None and self._messages is not None
        if conversation.case_id is not None:
            case = self._cases._cases.get(conversation.case_id)
            return case is not None and user_id in case.party_ids()
        return any(
            m.conversation_id == conversation.id and m.sender_id == user_id
            for m in self._messages._messages
        )

    async def list_for_user(self, user_id: UUID) -> list[ConversationSummary]:
        assert self._cases is not None and self._messages is not None
        summaries = []
        for conv in self._store.values():
            if not self._visible(conv, user_id):
                continue
            msgs = [m for m in self._messages._messages if m.conversation_id == conv.id]
            case = self._cases._cases.get(conv.case_id) if conv.case_id else None
            summaries.append(
                ConversationSummary(
                    conversation=conv,
                    display_title=case.issue_type if case else conv.title,
                    unread_count=sum(1 for m in msgs if m.sender_id != user_id and not m.is_read),
                    last_message_at=max((m.created_at for m in msgs), default=None),
                )
            )
        return summaries

    async def list_ids_for_user(self, user_id: UUID) -> list[UUID]:
        return [c.id for c in self._store.values() if self._visible(c, user_id)]


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader
    _touched: list[tuple[UUID, datetime]] = field(default_factory=list)

    async def create(self, conversation: Conversation) -> Conversation:
        self._reader._store[conversation.id] = conversation
        return conversation

    async def touch(self, conversation_id: UUID, ts: datetime) -> None:
        self._touched.append((conversation_id, ts))


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    cases: FakeCaseReader = field(default_factory=FakeCaseReader)
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False
    _rolled_back: bool = False

    def __post_init__(self) -> None:
        self.conversations._cases = self.cases
        self.conversations._messages = self.messages
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self._rolled_back = True

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            await self.rollback()

    # --- seeding helpers ---

    def add_user(self, principal: Principal) -> User:
        user = user_from(principal)
        self.users._users[user.id] = user
        return user

    def add_case(self, case: Case) -> Case:
        self.cases._cases[case.id] = case
        return case

    def add_conversation(self, conversation: Conversation) -> Conversation:
        self.conversations._store[conversation.id] = conversation
        return conversation

    def add_message(self, message: Message) -> Message:
        self.messages._messages.append(message)
        return message

    def stored_messages(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self.messages._messages if m.conversation_id == conversation_id]


def uow_factory_for(uow: FakeUoW):
    """Hand out the same in-memory UoW for every event."""
    def _factory() -> FakeUoW:
        return uow
    return _factory


@dataclass
class FakeSocket:
    """Stands in for a starlette WebSocket in registry and manager tests."""
    accepted: bool = False
    fail: bool = False
    sent: list[str] = field(default_factory=list)

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    def frames(self, event: str | None = None) -> list[dict[str, Any]]:
        frames = [json.loads(raw) for raw in self.sent]
        if event is None:
            return frames
        return [f for f in frames if f["type"] == event]


@dataclass
class CaseWorld:
    """Owner, assignee, an admin and a stranger around one case conversation."""
    uow: FakeUoW
    owner: Principal
    specialist: Principal
    admin: Principal
    stranger: Principal
    case: Case
    conversation: Conversation


@pytest.fixture
def case_world(user_principal, specialist_principal, admin_principal) -> CaseWorld:
    uow = FakeUoW()
    stranger = make_principal(Role.USER, "Dave Stranger")
    for p in (user_principal, specialist_principal, admin_principal, stranger):
        uow.add_user(p)
    case = uow.add_case(
        make_case(owner_id=user_principal.user_id, assignee_id=specialist_principal.user_id)
    )
    conv = uow.add_conversation(make_conversation(case_id=case.id))
    return CaseWorld(
        uow=uow,
        owner=user_principal,
        specialist=specialist_principal,
        admin=admin_principal,
        stranger=stranger,
        case=case,
        conversation=conv,
    )
