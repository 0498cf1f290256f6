"""Fake providers for unit testing with DI container."""

import logging
from typing import Any

import fakeredis.aioredis
import redis.asyncio as redis
from dishka import Provider, Scope, provide
from mongomock_motor import AsyncMongoMockClient

from notifyhub.core.database_context import Database
from notifyhub.settings import Settings


class FakeBoundaryClientProvider(Provider):
    """Fake boundary clients for unit testing.

    Overrides RedisProvider so pub/sub runs against an in-memory server.
    """

    scope = Scope.APP

    @provide
    def get_redis_client(self, logger: logging.Logger) -> redis.Redis:
        logger.info("Using FakeRedis for testing")
        return fakeredis.aioredis.FakeRedis(decode_responses=False)


class FakeDatabaseProvider(Provider):
    """Fake MongoDB database for unit testing using mongomock-motor."""

    scope = Scope.APP

    @provide
    def get_database(self, settings: Settings, logger: logging.Logger) -> Database:
        logger.info(f"Using AsyncMongoMockClient for testing: {settings.DATABASE_NAME}")
        client: AsyncMongoMockClient[dict[str, Any]] = AsyncMongoMockClient()
        # mongomock_motor's database is API-compatible with AsyncIOMotorDatabase
        return client[settings.DATABASE_NAME]  # type: ignore[return-value]
