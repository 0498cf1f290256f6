import logging
from collections.abc import Iterable
from typing import Any

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from notifyhub.domain.enums import BroadcastEvent
from notifyhub.schemas_pydantic.broadcast import RoomMessage


class RoomSubscription:
    """Subscription wrapper for Redis pubsub with typed message parsing."""

    def __init__(self, pubsub: redis.client.PubSub, channel: str) -> None:
        self._pubsub = pubsub
        self._channel = channel

    async def get(self, timeout: float = 0.5) -> RoomMessage | None:
        """Get next room message from the subscription."""
        msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=timeout)
        if not msg or msg.get("type") != "message":
            return None
        try:
            return RoomMessage.model_validate_json(msg["data"])
        except ValidationError:
            return None

    async def close(self) -> None:
        try:
            await self._pubsub.unsubscribe(self._channel)
        finally:
            await self._pubsub.aclose()  # type: ignore[no-untyped-call]


class RedisBroadcaster:
    """Redis pub/sub fan-out of live events to rooms (one channel per room).

    Publishing is fire-and-forget: a failed publish is logged and the caller
    carries on, since persisted state is already authoritative.
    """

    def __init__(self, redis_client: redis.Redis, logger: logging.Logger, channel_prefix: str = "notifyhub:room:"):
        self._redis = redis_client
        self._prefix = channel_prefix
        self.logger = logger

    def channel_for(self, room: str) -> str:
        return f"{self._prefix}{room}"

    async def notify_rooms(self, rooms: Iterable[str], event: BroadcastEvent, payload: dict[str, Any]) -> int:
        """Publish one message per room; returns how many publishes succeeded."""
        published = 0
        for room in sorted(set(rooms)):
            message = RoomMessage(event=event, room=room, payload=payload)
            try:
                await self._redis.publish(self.channel_for(room), message.model_dump_json())
            except RedisError as e:
                self.logger.warning(
                    "Failed to publish room event",
                    extra={"room": room, "event": str(event), "error": str(e)},
                )
                continue
            published += 1
        return published

    async def open_subscription(self, room: str) -> RoomSubscription:
        pubsub = self._redis.pubsub()
        channel = self.channel_for(room)
        await pubsub.subscribe(channel)
        return RoomSubscription(pubsub, channel)
