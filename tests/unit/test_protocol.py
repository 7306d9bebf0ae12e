from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from messaging_hub.domain.events.notifications import Actor, NewConversationNotification
from messaging_hub.infrastructure.ws.protocol import (
    ConversationRef,
    SendMessagePayload,
    TypingPayload,
    encode_envelope,
    encode_payload,
    frame,
)
from tests.conftest import make_message


def test_conversation_ref_accepts_bare_id_and_object():
    cid = uuid.uuid4()
    assert ConversationRef.model_validate(str(cid)).conversation_id == cid
    assert ConversationRef.model_validate({"conversationId": str(cid)}).conversation_id == cid
    assert ConversationRef.model_validate({"conversation_id": str(cid)}).conversation_id == cid


def test_send_message_payload_defaults():
    payload = SendMessagePayload.model_validate({"conversationId": str(uuid.uuid4()), "content": "hi"})
    assert payload.content_type == "text"
    assert payload.attachments == []


def test_typing_payload_rejects_garbage_id():
    with pytest.raises(ValidationError):
        TypingPayload.model_validate({"conversationId": "nope", "isTyping": True})


def test_message_payload_is_camel_case():
    message = make_message(conversation_id=uuid.uuid4(), sender_id=uuid.uuid4(), content="Hello")
    data = encode_payload(message)
    assert data["conversationId"] == str(message.conversation_id)
    assert data["senderKind"] == "user"
    assert data["isRead"] is False
    assert data["attachments"] == []


def test_new_conversation_envelope_shape():
    cid, actor_id = uuid.uuid4(), uuid.uuid4()
    envelope = NewConversationNotification(
        conversation_id=cid,
        title="Question",
        case_id=None,
        created_by=Actor(id=actor_id, name="Alice Owner"),
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    data = encode_envelope(envelope)

    assert data["type"] == "new_conversation"
    assert data["conversation"] == {"id": str(cid), "title": "Question", "caseId": None}
    assert data["createdBy"] == {"id": str(actor_id), "name": "Alice Owner"}


def test_frame_wraps_type_and_data():
    assert json.loads(frame("pong")) == {"type": "pong", "data": {}}
