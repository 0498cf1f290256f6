import asyncio
import logging
import time

from pymongo import UpdateOne
from pymongo.errors import ConnectionFailure, PyMongoError

from notifyhub.core.metrics import NotificationMetrics
from notifyhub.db.repositories import UserNotificationRepository, UserRepository
from notifyhub.domain.notification import DomainNotificationMaster, FanOutResult
from notifyhub.services.notifications.audience import selection_predicate_for
from notifyhub.settings import Settings


class FanOutEngine:
    """Materializes per-user state rows for one notification master.

    Matching users are streamed from the directory and written in unordered,
    bounded batches of upserts. Batches are independent: a transient failure
    retries only that batch, and a batch that keeps failing is counted and
    skipped without touching the rows earlier batches already wrote.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        state_repository: UserNotificationRepository,
        settings: Settings,
        metrics: NotificationMetrics,
        logger: logging.Logger,
    ) -> None:
        self.users = user_repository
        self.states = state_repository
        self.metrics = metrics
        self.logger = logger
        self.batch_size = settings.FANOUT_BATCH_SIZE
        self.max_retries = settings.FANOUT_MAX_BATCH_RETRIES
        self.retry_base_delay = settings.FANOUT_RETRY_BASE_DELAY

    async def deliver(self, master: DomainNotificationMaster) -> FanOutResult:
        start = time.monotonic()
        predicate = selection_predicate_for(master.audience)
        result = FanOutResult(notification_id=master.notification_id)

        batch: list[UpdateOne] = []
        async for username in self.users.iter_active_usernames(predicate):
            result.matched_users += 1
            batch.append(self.states.build_upsert(username, master.notification_id))
            if len(batch) >= self.batch_size:
                await self._flush(batch, result)
                batch = []
        if batch:
            await self._flush(batch, result)

        duration = time.monotonic() - start
        self.metrics.record_fanout(
            category=str(master.category),
            inserted=result.inserted,
            batches_flushed=result.batches_flushed,
            batches_failed=result.batches_failed,
            duration_seconds=duration,
        )
        self.logger.info(
            "Fan-out finished",
            extra={
                "notification_id": master.notification_id,
                "audience_mode": str(master.audience.mode),
                "matched_users": result.matched_users,
                "inserted": result.inserted,
                "batches_flushed": result.batches_flushed,
                "batches_failed": result.batches_failed,
                "duration_seconds": round(duration, 3),
            },
        )
        return result

    async def _flush(self, batch: list[UpdateOne], result: FanOutResult) -> None:
        attempt = 0
        while True:
            attempt += 1
            try:
                inserted = await self.states.bulk_upsert(batch)
            except ConnectionFailure as e:
                if attempt > self.max_retries:
                    self._give_up(batch, result, e, attempt)
                    return
                delay = self.retry_base_delay * (2 ** (attempt - 1))
                self.logger.warning(
                    f"Transient error writing fan-out batch, retrying in {delay}s",
                    extra={"notification_id": result.notification_id, "attempt": attempt, "error": str(e)},
                )
                self.metrics.record_fanout_retry(attempt)
                await asyncio.sleep(delay)
                continue
            except PyMongoError as e:
                self._give_up(batch, result, e, attempt)
                return

            result.inserted += inserted
            result.batches_flushed += 1
            return

    def _give_up(self, batch: list[UpdateOne], result: FanOutResult, error: Exception, attempts: int) -> None:
        result.batches_failed += 1
        self.logger.error(
            "Fan-out batch failed, continuing with the next batch",
            extra={
                "notification_id": result.notification_id,
                "batch_size": len(batch),
                "attempts": attempts,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
