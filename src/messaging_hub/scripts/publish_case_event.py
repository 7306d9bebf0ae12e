"""Publish a case event on the hub's channel, the way the case service does.

    python -m messaging_hub.scripts.publish_case_event case.updated '{"case_id": "...", ...}'
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys

import redis.asyncio as aioredis

from messaging_hub.application.dto.events import CaseEvent
from messaging_hub.config import settings
from messaging_hub.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from messaging_hub.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def publish(event: CaseEvent) -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        receivers = await RedisPubSubPublisher(redis).publish(
            settings.CASE_EVENTS_CHANNEL, event,
        )
        logger.info("Published %s to %s (%d receivers)", event.event_type, settings.CASE_EVENTS_CHANNEL, receivers)
    finally:
        await redis.aclose()


def main() -> None:
    configure_logging()
    if len(sys.argv) != 3:
        sys.exit("usage: publish_case_event <event_type> <json-data>")
    asyncio.run(publish(CaseEvent(event_type=sys.argv[1], data=json.loads(sys.argv[2]))))


if __name__ == "__main__":
    main()
