from __future__ import annotations

import uuid

import pytest

from messaging_hub.infrastructure.ws.registry import Connection, SessionRegistry
from tests.conftest import FakeSocket, make_principal


def _connection(principal=None) -> Connection:
    return Connection(socket=FakeSocket(), principal=principal or make_principal())


@pytest.mark.asyncio
async def test_register_and_resolve():
    registry = SessionRegistry()
    conn = _connection()

    assert await registry.register(conn) is None
    assert registry.resolve(conn.user_id) is conn
    assert registry.is_connected(conn.user_id)
    assert registry.connection_count == 1


@pytest.mark.asyncio
async def test_register_supersedes_and_detaches_previous():
    registry = SessionRegistry()
    principal = make_principal()
    old, new = _connection(principal), _connection(principal)
    room = uuid.uuid4()

    await registry.register(old)
    await registry.join(principal.user_id, room)
    superseded = await registry.register(new)

    assert superseded is old
    assert old.rooms == set()
    assert registry.resolve(principal.user_id) is new
    assert registry.room_members(room) == []


@pytest.mark.asyncio
async def test_late_unregister_of_superseded_connection_keeps_successor():
    registry = SessionRegistry()
    principal = make_principal()
    old, new = _connection(principal), _connection(principal)
    room = uuid.uuid4()

    await registry.register(old)
    await registry.register(new)
    await registry.join(principal.user_id, room)

    removed = await registry.unregister(principal.user_id, old)

    assert removed is False
    assert registry.resolve(principal.user_id) is new
    assert registry.is_subscribed(principal.user_id, room)


@pytest.mark.asyncio
async def test_unregister_drops_room_membership():
    registry = SessionRegistry()
    conn = _connection()
    rooms = [uuid.uuid4(), uuid.uuid4()]
    await registry.register(conn)
    for room in rooms:
        await registry.join(conn.user_id, room)

    assert await registry.unregister(conn.user_id, conn) is True

    assert not registry.is_connected(conn.user_id)
    for room in rooms:
        assert registry.subscribed_user_ids(room) == set()


@pytest.mark.asyncio
async def test_join_without_connection_is_rejected():
    registry = SessionRegistry()
    assert await registry.join(uuid.uuid4(), uuid.uuid4()) is False


@pytest.mark.asyncio
async def test_join_twice_keeps_single_membership():
    registry = SessionRegistry()
    conn = _connection()
    room = uuid.uuid4()
    await registry.register(conn)

    await registry.join(conn.user_id, room)
    await registry.join(conn.user_id, room)

    assert registry.rooms_of(conn.user_id) == frozenset({room})
    assert len(registry.room_members(room)) == 1


@pytest.mark.asyncio
async def test_leave_is_idempotent():
    registry = SessionRegistry()
    conn = _connection()
    room = uuid.uuid4()
    await registry.register(conn)
    await registry.join(conn.user_id, room)

    assert await registry.leave(conn.user_id, room) is True
    assert await registry.leave(conn.user_id, room) is False
    assert not registry.is_subscribed(conn.user_id, room)


@pytest.mark.asyncio
async def test_clear_forgets_everything():
    registry = SessionRegistry()
    conn = _connection()
    room = uuid.uuid4()
    await registry.register(conn)
    await registry.join(conn.user_id, room)

    await registry.clear()

    assert registry.connection_count == 0
    assert registry.room_members(room) == []
    assert conn.rooms == set()
