"""Integration tests for the HTTP fallback (in-memory UoW via dependency override)."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from messaging_hub.api.deps import get_uow, get_uow_factory
from messaging_hub.app import create_app
from messaging_hub.config import settings
from messaging_hub.domain.value_objects.enums import Role
from tests.conftest import make_message, make_principal, uow_factory_for


def _make_token(user_id: uuid.UUID) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _auth(principal) -> dict[str, str]:
    return {"Authorization": f"Bearer {_make_token(principal.user_id)}"}


@pytest.fixture
def client(case_world):
    app = create_app()
    uow = case_world.uow

    async def _override():
        yield uow

    app.dependency_overrides[get_uow] = _override
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory_for(uow)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def _base(path: str) -> str:
    return f"/api/v1/messaging{path}"


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "connections": 0}


def test_request_id_is_echoed(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/healthz").headers["X-Request-ID"]


def test_missing_token_is_unauthorized(client):
    resp = client.get(_base("/conversations"))
    assert resp.status_code == 401


def test_token_for_unknown_user_is_unauthorized(client):
    resp = client.get(_base("/conversations"), headers=_auth(make_principal()))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not found"


def test_token_with_bad_signature_is_unauthorized(client, case_world):
    token = jwt.encode({"sub": str(case_world.owner.user_id)}, "wrong-secret", algorithm="HS256")
    resp = client.get(_base("/conversations"), headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_list_conversations(client, case_world):
    w = case_world
    w.uow.add_message(make_message(conversation_id=w.conversation.id, sender_id=w.specialist.user_id))

    resp = client.get(_base("/conversations"), headers=_auth(w.owner))

    assert resp.status_code == 200
    [item] = resp.json()
    assert item["id"] == str(w.conversation.id)
    assert item["caseId"] == str(w.case.id)
    assert item["displayTitle"] == w.case.issue_type
    assert item["unreadCount"] == 1


def test_get_conversation_forbidden_for_stranger(client, case_world):
    w = case_world
    resp = client.get(_base(f"/conversations/{w.conversation.id}"), headers=_auth(w.stranger))
    assert resp.status_code == 403
    assert resp.json() == {"detail": "Access denied to conversation"}


def test_get_unknown_conversation(client, case_world):
    resp = client.get(_base(f"/conversations/{uuid.uuid4()}"), headers=_auth(case_world.owner))
    assert resp.status_code == 404


def test_send_message(client, case_world):
    w = case_world
    resp = client.post(
        _base(f"/conversations/{w.conversation.id}/messages"),
        json={"content": "Hello from HTTP"},
        headers=_auth(w.owner),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["content"] == "Hello from HTTP"
    assert data["senderKind"] == "user"
    assert data["contentType"] == "text"
    assert data["sender"]["displayName"] == w.owner.display_name
    assert len(w.uow.stored_messages(w.conversation.id)) == 1


def test_send_blank_message_is_unprocessable(client, case_world):
    w = case_world
    resp = client.post(
        _base(f"/conversations/{w.conversation.id}/messages"),
        json={"content": "  "},
        headers=_auth(w.owner),
    )
    assert resp.status_code == 422


def test_fetch_messages_marks_read(client, case_world):
    w = case_world
    for i in range(3):
        w.uow.add_message(
            make_message(conversation_id=w.conversation.id, sender_id=w.specialist.user_id, content=str(i))
        )

    resp = client.get(
        _base(f"/conversations/{w.conversation.id}/messages"),
        params={"page": 1, "pageSize": 2},
        headers=_auth(w.owner),
    )

    assert resp.status_code == 200
    assert [m["content"] for m in resp.json()] == ["0", "1"]
    assert all(m.is_read for m in w.uow.stored_messages(w.conversation.id))


def test_mark_read_and_unread_count(client, case_world):
    w = case_world
    w.uow.add_message(make_message(conversation_id=w.conversation.id, sender_id=w.specialist.user_id))

    assert client.get(_base("/unread"), headers=_auth(w.owner)).json() == {"unreadCount": 1}

    resp = client.post(_base(f"/conversations/{w.conversation.id}/read"), headers=_auth(w.owner))
    assert resp.status_code == 200
    assert resp.json() == {"count": 1, "message": "1 messages marked as read"}

    assert client.get(_base("/unread"), headers=_auth(w.owner)).json() == {"unreadCount": 0}


def test_delete_message(client, case_world):
    w = case_world
    fresh = w.uow.add_message(make_message(conversation_id=w.conversation.id, sender_id=w.owner.user_id))
    old = w.uow.add_message(
        make_message(
            conversation_id=w.conversation.id,
            sender_id=w.owner.user_id,
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        )
    )

    assert client.delete(_base(f"/messages/{fresh.id}"), headers=_auth(w.owner)).status_code == 200
    assert client.delete(_base(f"/messages/{old.id}"), headers=_auth(w.owner)).status_code == 200
    assert client.delete(_base(f"/messages/{old.id}"), headers=_auth(w.specialist)).status_code == 404

    [remaining] = w.uow.stored_messages(w.conversation.id)
    assert remaining.id == old.id
    assert remaining.content == "[Message has been redacted]"


def test_create_conversation(client, case_world):
    w = case_world
    resp = client.post(
        _base("/conversations"),
        json={"title": "Quick question", "participants": [str(w.specialist.user_id)]},
        headers=_auth(w.owner),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["title"] == "Quick question"
    assert data["caseId"] is None


def test_create_conversation_with_unknown_participant(client, case_world):
    resp = client.post(
        _base("/conversations"),
        json={"participants": [str(uuid.uuid4())]},
        headers=_auth(case_world.owner),
    )
    assert resp.status_code == 422


def test_role_is_taken_from_user_record(client, case_world):
    w = case_world
    specialist_user = w.uow.users._users[w.specialist.user_id]
    assert specialist_user.role == Role.SPECIALIST

    resp = client.post(
        _base(f"/conversations/{w.conversation.id}/messages"),
        json={"content": "Specialist here"},
        headers=_auth(w.specialist),
    )
    assert resp.json()["senderKind"] == "specialist"
