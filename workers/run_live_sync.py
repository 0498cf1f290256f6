"""Run change-stream live sync as a standalone worker service"""

import asyncio
import logging
import signal

from beanie import init_beanie

from notifyhub.core.container import create_live_sync_container
from notifyhub.core.database_context import Database
from notifyhub.core.logging import setup_logger
from notifyhub.db.docs import ALL_DOCUMENTS
from notifyhub.domain.sync import SyncState
from notifyhub.services.live_sync import LiveSyncService
from notifyhub.settings import Settings, get_settings

STATUS_LOG_INTERVAL = 60.0


async def run_live_sync(settings: Settings) -> None:
    """Run the live sync service until a signal arrives or the feed degrades."""
    container = create_live_sync_container(settings)
    logger = await container.get(logging.Logger)

    database = await container.get(Database)
    await init_beanie(database=database, document_models=ALL_DOCUMENTS)

    live_sync = await container.get(LiveSyncService)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await live_sync.start()
        while live_sync.state == SyncState.RUNNING and not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=STATUS_LOG_INTERVAL)
            except asyncio.TimeoutError:
                logger.info(f"Live sync status: {live_sync.status()}")

        if live_sync.state == SyncState.DEGRADED:
            logger.warning("Live sync is degraded; worker exiting")
    finally:
        logger.info("Initiating graceful shutdown...")
        await live_sync.stop()
        handled = await live_sync.drain()
        logger.info(f"Drained {handled} queued change events")
        await container.close()


def main() -> None:
    """Main entry point for live sync worker"""
    settings = get_settings()
    logger = setup_logger(settings.LOG_LEVEL)
    logger.info("Starting live sync worker...")

    if not settings.ENABLE_LIVE_SYNC:
        logger.info("ENABLE_LIVE_SYNC is false; nothing to run")
        return

    asyncio.run(run_live_sync(settings))


if __name__ == "__main__":
    main()
