"""Redis Pub/Sub: case event publisher and the subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from messaging_hub.application.dto.events import CaseEvent
from messaging_hub.infrastructure.bus.serializer import decode_case_event, encode_case_event

logger = logging.getLogger(__name__)

RECONNECT_DELAY_SECONDS = 2.0


class RedisPubSubPublisher:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, event: CaseEvent) -> int:
        raw = encode_case_event(event)
        return await self._redis.publish(channel, raw)


OnEventCallback = Callable[[CaseEvent], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches events."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Redis Pub/Sub subscriber stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self._listen()
            except RedisError:
                logger.warning(
                    "Redis Pub/Sub connection lost, retrying in %.1fs",
                    RECONNECT_DELAY_SECONDS,
                    exc_info=True,
                )
                await asyncio.sleep(RECONNECT_DELAY_SECONDS)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    event = decode_case_event(message["data"])
                except ValueError:
                    logger.warning("Dropping malformed pubsub message: %r", message["data"])
                    continue
                try:
                    await self._callback(event)
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            try:
                await pubsub.unsubscribe(self._channel)
                await pubsub.aclose()
            except RedisError:
                logger.debug("Pub/Sub cleanup failed", exc_info=True)
