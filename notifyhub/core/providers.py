import logging
from typing import AsyncIterator

import redis.asyncio as redis
from dishka import Provider, Scope, from_context, provide

from notifyhub.core.database_context import Database, DatabaseConfig, DBClient, create_client
from notifyhub.core.logging import setup_logger
from notifyhub.core.metrics import NotificationMetrics, RecycleMetrics, SyncMetrics
from notifyhub.db.repositories import (
    NotificationRepository,
    RecordRepository,
    UserNotificationRepository,
    UserRepository,
)
from notifyhub.services.broadcast import RedisBroadcaster
from notifyhub.services.live_sync import LiveSyncService
from notifyhub.services.notifications import (
    FanOutEngine,
    ListMergeEngine,
    NotificationService,
    ReconciliationCoordinator,
)
from notifyhub.services.recycle import AutoDeleteService, RecycleBinService, SnapshotStore
from notifyhub.settings import Settings


class SettingsProvider(Provider):
    """Settings are passed in as container context."""

    scope = Scope.APP
    settings = from_context(provides=Settings, scope=Scope.APP)


class LoggingProvider(Provider):
    scope = Scope.APP

    @provide
    def get_logger(self, settings: Settings) -> logging.Logger:
        return setup_logger(settings.LOG_LEVEL)


class DatabaseProvider(Provider):
    scope = Scope.APP

    @provide
    async def get_client(self, settings: Settings, logger: logging.Logger) -> AsyncIterator[DBClient]:
        client = create_client(DatabaseConfig(mongodb_url=settings.MONGODB_URL, db_name=settings.DATABASE_NAME))
        logger.info("MongoDB client created", extra={"database": settings.DATABASE_NAME})
        yield client
        client.close()
        logger.info("MongoDB client closed")

    @provide
    def get_database(self, client: DBClient, settings: Settings) -> Database:
        return client[settings.DATABASE_NAME]


class RedisProvider(Provider):
    scope = Scope.APP

    @provide
    async def get_redis_client(self, settings: Settings, logger: logging.Logger) -> AsyncIterator[redis.Redis]:
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            ssl=settings.REDIS_SSL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        logger.info(f"Redis client created for {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}")
        yield client
        await client.aclose()


class MetricsProvider(Provider):
    scope = Scope.APP

    @provide
    def get_notification_metrics(self, settings: Settings) -> NotificationMetrics:
        return NotificationMetrics(settings)

    @provide
    def get_recycle_metrics(self, settings: Settings) -> RecycleMetrics:
        return RecycleMetrics(settings)

    @provide
    def get_sync_metrics(self, settings: Settings) -> SyncMetrics:
        return SyncMetrics(settings)


class RepositoryProvider(Provider):
    scope = Scope.APP

    @provide
    def get_user_repository(self) -> UserRepository:
        return UserRepository()

    @provide
    def get_notification_repository(self) -> NotificationRepository:
        return NotificationRepository()

    @provide
    def get_user_notification_repository(self) -> UserNotificationRepository:
        return UserNotificationRepository()

    @provide
    def get_record_repository(self, database: Database) -> RecordRepository:
        return RecordRepository(database)


class BroadcastProvider(Provider):
    scope = Scope.APP

    @provide
    def get_broadcaster(
            self, redis_client: redis.Redis, settings: Settings, logger: logging.Logger
    ) -> RedisBroadcaster:
        return RedisBroadcaster(redis_client, logger, channel_prefix=settings.BROADCAST_CHANNEL_PREFIX)


class NotificationServicesProvider(Provider):
    scope = Scope.APP

    @provide
    def get_fanout_engine(
            self,
            user_repository: UserRepository,
            state_repository: UserNotificationRepository,
            settings: Settings,
            metrics: NotificationMetrics,
            logger: logging.Logger,
    ) -> FanOutEngine:
        return FanOutEngine(user_repository, state_repository, settings, metrics, logger)

    @provide
    def get_list_merge_engine(
            self,
            notification_repository: NotificationRepository,
            state_repository: UserNotificationRepository,
            settings: Settings,
            metrics: NotificationMetrics,
            logger: logging.Logger,
    ) -> ListMergeEngine:
        return ListMergeEngine(notification_repository, state_repository, settings, metrics, logger)

    @provide
    def get_reconciliation_coordinator(
            self,
            fanout: FanOutEngine,
            notification_repository: NotificationRepository,
            state_repository: UserNotificationRepository,
            user_repository: UserRepository,
            broadcaster: RedisBroadcaster,
            metrics: NotificationMetrics,
            logger: logging.Logger,
    ) -> ReconciliationCoordinator:
        return ReconciliationCoordinator(
            fanout=fanout,
            notification_repository=notification_repository,
            state_repository=state_repository,
            user_repository=user_repository,
            broadcaster=broadcaster,
            metrics=metrics,
            logger=logger,
        )

    @provide
    def get_notification_service(
            self,
            notification_repository: NotificationRepository,
            state_repository: UserNotificationRepository,
            list_engine: ListMergeEngine,
            coordinator: ReconciliationCoordinator,
            metrics: NotificationMetrics,
            logger: logging.Logger,
    ) -> NotificationService:
        return NotificationService(
            notification_repository=notification_repository,
            state_repository=state_repository,
            list_engine=list_engine,
            coordinator=coordinator,
            metrics=metrics,
            logger=logger,
        )

    @provide
    def get_live_sync_service(
            self,
            database: Database,
            coordinator: ReconciliationCoordinator,
            settings: Settings,
            metrics: SyncMetrics,
            logger: logging.Logger,
    ) -> LiveSyncService:
        return LiveSyncService(database, coordinator, settings, metrics, logger)


class RecycleServicesProvider(Provider):
    scope = Scope.APP

    @provide
    def get_snapshot_store(self, settings: Settings, logger: logging.Logger) -> SnapshotStore:
        return SnapshotStore(settings.RECYCLEBIN_ROOT, logger)

    @provide
    def get_recycle_bin_service(
            self,
            record_repository: RecordRepository,
            snapshot_store: SnapshotStore,
            broadcaster: RedisBroadcaster,
            metrics: RecycleMetrics,
            logger: logging.Logger,
    ) -> RecycleBinService:
        return RecycleBinService(record_repository, snapshot_store, broadcaster, metrics, logger)

    @provide
    def get_auto_delete_service(
            self,
            user_repository: UserRepository,
            state_repository: UserNotificationRepository,
            snapshot_store: SnapshotStore,
            notification_service: NotificationService,
            settings: Settings,
            metrics: RecycleMetrics,
            logger: logging.Logger,
    ) -> AutoDeleteService:
        return AutoDeleteService(
            user_repository=user_repository,
            state_repository=state_repository,
            snapshot_store=snapshot_store,
            notification_service=notification_service,
            settings=settings,
            metrics=metrics,
            logger=logger,
        )
