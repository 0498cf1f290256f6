import logging
from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

# Raw document type returned by the driver
MongoDocument = dict[str, Any]
DBClient = AsyncIOMotorClient
Database = AsyncIOMotorDatabase
Collection = AsyncIOMotorCollection


@dataclass(frozen=True)
class DatabaseConfig:
    mongodb_url: str
    db_name: str
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000
    max_pool_size: int = 100
    min_pool_size: int = 10
    retry_writes: bool = True
    retry_reads: bool = True


def create_client(config: DatabaseConfig) -> DBClient:
    return AsyncIOMotorClient(
        config.mongodb_url,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        connectTimeoutMS=config.connect_timeout_ms,
        maxPoolSize=config.max_pool_size,
        minPoolSize=config.min_pool_size,
        retryWrites=config.retry_writes,
        retryReads=config.retry_reads,
        tz_aware=True,
    )


async def is_change_stream_capable(database: Database, logger: logging.Logger) -> bool:
    """Change streams need a replica set member or a mongos router.

    Any failure of the probe (unsupported command, auth, standalone server) is
    reported as "not capable" so callers can fall back to on-demand reconciliation.
    """
    try:
        info = await database.command("hello")
    except Exception as e:
        logger.warning("Change stream capability check failed", extra={"error": str(e)})
        return False
    return bool(info.get("setName")) or info.get("msg") == "isdbgrid"
