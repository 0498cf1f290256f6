"""Run the daily user auto-delete job as a standalone worker service"""

import asyncio
import logging
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from beanie import init_beanie

from notifyhub.core.container import create_auto_delete_container
from notifyhub.core.database_context import Database
from notifyhub.core.logging import setup_logger
from notifyhub.db.docs import ALL_DOCUMENTS
from notifyhub.services.recycle import AutoDeleteService
from notifyhub.settings import Settings, get_settings


async def run_auto_delete(settings: Settings) -> None:
    """Schedule the auto-delete run daily until a signal arrives."""
    container = create_auto_delete_container(settings)
    logger = await container.get(logging.Logger)

    database = await container.get(Database)
    await init_beanie(database=database, document_models=ALL_DOCUMENTS)

    service = await container.get(AutoDeleteService)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        service.run,
        trigger="cron",
        hour=settings.AUTO_DELETE_RUN_HOUR,
        minute=0,
        id="auto_delete_users",
        max_instances=1,
        misfire_grace_time=3600,
    )

    try:
        scheduler.start()
        logger.info(
            f"Auto-delete scheduled daily at {settings.AUTO_DELETE_RUN_HOUR:02d}:00 UTC",
            extra={
                "enabled": settings.AUTO_DELETE_ENABLED,
                "age_days": settings.AUTO_DELETE_AGE_DAYS,
                "notify_roles": settings.AUTO_DELETE_NOTIFY_ROLES,
            },
        )
        await stop_event.wait()
    finally:
        logger.info("Initiating graceful shutdown...")
        scheduler.shutdown(wait=False)
        await container.close()


def main() -> None:
    """Main entry point for auto-delete worker"""
    settings = get_settings()
    logger = setup_logger(settings.LOG_LEVEL)
    logger.info("Starting auto-delete worker...")

    asyncio.run(run_auto_delete(settings))


if __name__ == "__main__":
    main()
