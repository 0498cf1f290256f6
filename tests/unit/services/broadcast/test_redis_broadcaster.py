import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from notifyhub.domain.enums import BroadcastEvent
from notifyhub.schemas_pydantic.broadcast import RoomMessage
from notifyhub.services.broadcast import RedisBroadcaster, RoomSubscription
from notifyhub.settings import Settings

_test_logger = logging.getLogger("test.services.broadcast")

pytestmark = pytest.mark.unit


async def _next_message(subscription: RoomSubscription) -> RoomMessage | None:
    for _ in range(10):
        message = await subscription.get(timeout=0.2)
        if message is not None:
            return message
    return None


@pytest.mark.asyncio
async def test_publish_reaches_room_subscribers(broadcaster: RedisBroadcaster) -> None:
    subscription = await broadcaster.open_subscription("user:alice")
    try:
        published = await broadcaster.notify_rooms(
            ["user:alice", "user:alice", "user:bob"], BroadcastEvent.NOTIFICATION_NEW, {"notification_id": "n1"}
        )
        message = await _next_message(subscription)
    finally:
        await subscription.close()

    assert published == 2
    assert message is not None
    assert message.room == "user:alice"
    assert message.payload == {"notification_id": "n1"}
    assert message.sent_at.endswith("Z")


def test_channel_names_use_prefix(test_settings: Settings) -> None:
    broadcaster = RedisBroadcaster(MagicMock(), _test_logger, channel_prefix=test_settings.BROADCAST_CHANNEL_PREFIX)
    assert broadcaster.channel_for("broadcast") == "test:room:broadcast"


@pytest.mark.asyncio
async def test_publish_failure_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    redis_client = MagicMock()
    redis_client.publish = AsyncMock(side_effect=RedisConnectionError("redis down"))
    broadcaster = RedisBroadcaster(redis_client, _test_logger)

    with caplog.at_level(logging.WARNING, logger="test.services.broadcast"):
        published = await broadcaster.notify_rooms(["role:tenant"], BroadcastEvent.NOTIFICATION_NEW, {})

    assert published == 0
    assert "Failed to publish room event" in caplog.text


@pytest.mark.asyncio
async def test_malformed_message_is_skipped() -> None:
    pubsub = MagicMock()
    pubsub.get_message = AsyncMock(return_value={"type": "message", "data": b"{not json"})
    subscription = RoomSubscription(pubsub, "test:room:broadcast")

    assert await subscription.get() is None
