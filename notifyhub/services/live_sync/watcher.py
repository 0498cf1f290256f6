import asyncio
import logging
from typing import Any

from pymongo.errors import PyMongoError

from notifyhub.core.database_context import Collection, Database, MongoDocument, is_change_stream_capable
from notifyhub.core.metrics import SyncMetrics
from notifyhub.db.docs import NotificationMasterDocument, UserDocument
from notifyhub.domain.enums import UserRole
from notifyhub.domain.sync import ChangeEntity, ChangeEvent, ChangeKind, SyncState
from notifyhub.domain.user import User
from notifyhub.services.notifications.reconciliation import ReconciliationCoordinator
from notifyhub.settings import Settings

_OPERATION_KINDS = {
    "insert": ChangeKind.INSERTED,
    "update": ChangeKind.UPDATED,
    "replace": ChangeKind.UPDATED,
}


def to_change_event(entity: ChangeEntity, change: MongoDocument) -> ChangeEvent | None:
    """Translate a raw change stream document; None for operations we do not follow."""
    kind = _OPERATION_KINDS.get(change.get("operationType", ""))
    document = change.get("fullDocument")
    if kind is None or not document:
        return None
    updated_fields = (change.get("updateDescription") or {}).get("updatedFields")
    return ChangeEvent(kind=kind, entity=entity, document=document, updated_fields=updated_fields)


class LiveSyncService:
    """Follows MongoDB change streams and feeds the reconciliation handlers.

    Two watcher tasks (masters, users) push events onto a bounded queue and a
    single consumer task dispatches them. Deployments without change streams
    (standalone server) leave the service DEGRADED; on-demand reconciliation
    still covers them.
    """

    def __init__(
        self,
        database: Database,
        coordinator: ReconciliationCoordinator,
        settings: Settings,
        metrics: SyncMetrics,
        logger: logging.Logger,
    ) -> None:
        self.database = database
        self.coordinator = coordinator
        self.settings = settings
        self.metrics = metrics
        self.logger = logger

        self._state = SyncState.IDLE
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=settings.SYNC_QUEUE_SIZE)
        self._tasks: list[asyncio.Task[None]] = []
        self._reconnect_attempts: dict[ChangeEntity, int] = {}
        self._processed = 0

    @property
    def state(self) -> SyncState:
        return self._state

    async def start(self) -> None:
        if self._state != SyncState.IDLE:
            self.logger.warning(f"Cannot start live sync in state: {self._state}")
            return

        if not self.settings.ENABLE_LIVE_SYNC:
            self.logger.info("Live sync disabled by configuration")
            self._state = SyncState.DEGRADED
            return

        if not await is_change_stream_capable(self.database, self.logger):
            self.logger.info("Change streams unavailable (no replica set or mongos); live sync disabled")
            self._state = SyncState.DEGRADED
            return

        self._state = SyncState.RUNNING
        masters = NotificationMasterDocument.get_motor_collection()
        users = UserDocument.get_motor_collection()
        self._tasks = [
            asyncio.create_task(self._watch(ChangeEntity.MASTER, masters, ["insert"])),
            asyncio.create_task(self._watch(ChangeEntity.USER, users, ["insert", "update", "replace"])),
            asyncio.create_task(self._consume()),
        ]
        self.logger.info("Live sync started")

    async def stop(self) -> None:
        if self._state in (SyncState.STOPPED, SyncState.IDLE):
            self._state = SyncState.STOPPED
            return

        self.logger.info("Stopping live sync...")
        self._state = SyncState.STOPPING
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._state = SyncState.STOPPED
        self.logger.info("Live sync stopped")

    async def __aenter__(self) -> "LiveSyncService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    def status(self) -> dict[str, Any]:
        return {
            "state": self._state,
            "queue_size": self._queue.qsize(),
            "processed": self._processed,
            "reconnect_attempts": {str(k): v for k, v in self._reconnect_attempts.items()},
        }

    async def _watch(self, entity: ChangeEntity, collection: Collection, operations: list[str]) -> None:
        pipeline = [{"$match": {"operationType": {"$in": operations}}}]
        while self._state == SyncState.RUNNING:
            try:
                async with collection.watch(pipeline, full_document="updateLookup") as stream:
                    self._reconnect_attempts[entity] = 0
                    async for change in stream:
                        event = to_change_event(entity, change)
                        if event is not None:
                            self.enqueue(event)
            except PyMongoError as e:
                self.logger.error(f"Change stream error on {entity} feed: {e}")
                await self._handle_watch_error(entity)

    async def _handle_watch_error(self, entity: ChangeEntity) -> None:
        """Exponential backoff; too many consecutive failures leave live sync degraded."""
        attempts = self._reconnect_attempts.get(entity, 0) + 1
        self._reconnect_attempts[entity] = attempts

        if attempts > self.settings.SYNC_MAX_RECONNECT_ATTEMPTS:
            self.logger.error(
                f"Max reconnect attempts ({self.settings.SYNC_MAX_RECONNECT_ATTEMPTS}) exceeded on {entity} feed, "
                f"live sync degraded"
            )
            self._state = SyncState.DEGRADED
            return

        backoff = min(
            self.settings.SYNC_RECONNECT_DELAY * (2 ** (attempts - 1)),
            self.settings.SYNC_MAX_RECONNECT_DELAY,
        )
        self.logger.info(
            f"Reconnecting {entity} feed in {backoff}s "
            f"(attempt {attempts}/{self.settings.SYNC_MAX_RECONNECT_ATTEMPTS})"
        )
        self.metrics.record_reconnect(str(entity))
        await asyncio.sleep(backoff)

    def enqueue(self, event: ChangeEvent) -> bool:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.metrics.record_event_dropped(str(event.entity))
            self.logger.warning(
                "Live sync queue full, dropping change event",
                extra={"entity": str(event.entity), "kind": str(event.kind)},
            )
            return False
        self.metrics.record_event_received(str(event.entity), str(event.kind))
        return True

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.dispatch(event)
            except Exception as e:
                self.metrics.record_handler_error(str(event.entity), type(e).__name__)
                self.logger.error(f"Live sync handler failed: {e}", exc_info=True)
            finally:
                self.metrics.record_event_dispatched()
                self._queue.task_done()

    async def drain(self) -> int:
        """Dispatch everything currently queued; used by the worker on shutdown and by tests."""
        handled = 0
        while not self._queue.empty():
            event = self._queue.get_nowait()
            try:
                await self.dispatch(event)
                handled += 1
            finally:
                self.metrics.record_event_dispatched()
                self._queue.task_done()
        return handled

    async def dispatch(self, event: ChangeEvent) -> None:
        self._processed += 1
        doc = event.document

        if event.entity is ChangeEntity.MASTER:
            # Request-path creation already broadcast; the feed only guarantees the rows
            await self.coordinator.backfill_for_notification(doc["notification_id"])
            return

        user = User(
            username=doc["username"],
            role=UserRole(doc.get("role", UserRole.GENERAL)),
            is_active=doc.get("is_active", True),
        )
        if event.kind is ChangeKind.INSERTED:
            if user.is_active:
                await self.coordinator.on_user_activated(user)
            return

        if not user.is_active:
            await self.coordinator.on_user_deactivated(user)
            return

        # A replace carries no field diff; reconcile against the current role
        changed = event.updated_fields
        if changed is None or "role" in changed:
            await self.coordinator.on_user_role_changed(
                user, user.role, remove_stale=self.settings.SYNC_REMOVE_STALE_ON_ROLE_CHANGE
            )
        elif changed.get("is_active") is True:
            await self.coordinator.on_user_activated(user)
