import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator

from beanie import init_beanie
from dishka import AsyncContainer
from fastapi import FastAPI

from notifyhub.core.database_context import Database
from notifyhub.db.docs import ALL_DOCUMENTS
from notifyhub.services.live_sync import LiveSyncService
from notifyhub.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan with dishka dependency injection.

    Beanie is bound to the container's database before the first request, and
    the live sync service runs for the lifetime of the app when enabled.
    The container itself is closed by the dishka FastAPI integration.
    """
    container: AsyncContainer = app.state.dishka_container
    settings = await container.get(Settings)
    logger = await container.get(logging.Logger)
    logger.info(
        "Starting application with dishka DI",
        extra={
            "project_name": settings.PROJECT_NAME,
            "environment": "test" if settings.TESTING else "production",
        },
    )

    database = await container.get(Database)
    await init_beanie(database=database, document_models=ALL_DOCUMENTS)
    logger.info("Beanie ODM initialized with indexes")

    async with AsyncExitStack() as stack:
        if settings.ENABLE_LIVE_SYNC:
            live_sync = await container.get(LiveSyncService)
            await stack.enter_async_context(live_sync)
            logger.info(f"Live sync state: {live_sync.state}")
        yield
