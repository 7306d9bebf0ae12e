from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any

import pytest

from messaging_hub.application.dto.events import CaseEvent
from messaging_hub.infrastructure.bus.redis_pubsub import RedisPubSubPublisher, RedisPubSubSubscriber
from messaging_hub.infrastructure.bus.serializer import decode_case_event, encode_case_event


@dataclass
class FakePubSub:
    messages: list[dict[str, Any]]
    subscribed: list[str] = field(default_factory=list)
    closed: bool = False

    async def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.subscribed.remove(channel)

    async def aclose(self) -> None:
        self.closed = True

    async def listen(self):
        for message in self.messages:
            yield message


@dataclass
class FakeRedis:
    pubsub_instance: FakePubSub | None = None
    published: list[tuple[str, str]] = field(default_factory=list)

    def pubsub(self) -> FakePubSub:
        assert self.pubsub_instance is not None
        return self.pubsub_instance

    async def publish(self, channel: str, raw: str) -> int:
        self.published.append((channel, raw))
        return 1


class TestCodec:
    def test_encode_stringifies_ids(self):
        case_id = uuid.uuid4()
        raw = encode_case_event(CaseEvent(event_type="case.created", data={"case_id": case_id}))
        assert json.loads(raw) == {"event": "case.created", "data": {"case_id": str(case_id)}}

    def test_decode_defaults_missing_data(self):
        event = decode_case_event('{"event": "case.created"}')
        assert event == CaseEvent(event_type="case.created", data={})

    @pytest.mark.parametrize("raw", ["not json", "[]", '{"data": {}}', '{"event": "x", "data": [1]}'])
    def test_decode_rejects_malformed_frames(self, raw):
        with pytest.raises(ValueError):
            decode_case_event(raw)


@pytest.mark.asyncio
async def test_publisher_writes_to_channel():
    redis = FakeRedis()
    receivers = await RedisPubSubPublisher(redis).publish(
        "case.events", CaseEvent(event_type="case.updated", data={"status": "closed"}),
    )

    assert receivers == 1
    [(channel, raw)] = redis.published
    assert channel == "case.events"
    assert decode_case_event(raw).data == {"status": "closed"}


@pytest.mark.asyncio
async def test_subscriber_dispatches_valid_events_and_skips_the_rest():
    pubsub = FakePubSub(messages=[
        {"type": "subscribe", "data": 1},
        {"type": "message", "data": "garbage"},
        {"type": "message", "data": '{"event": "case.created", "data": {"case_id": "c1"}}'},
        {"type": "message", "data": '{"event": "case.updated", "data": {}}'},
    ])
    received: list[CaseEvent] = []

    async def _callback(event: CaseEvent) -> None:
        received.append(event)
        if event.event_type == "case.created":
            raise RuntimeError("handler blew up")

    subscriber = RedisPubSubSubscriber(FakeRedis(pubsub), "case.events", _callback)
    await subscriber._listen()

    assert [e.event_type for e in received] == ["case.created", "case.updated"]
    assert pubsub.subscribed == []
    assert pubsub.closed
