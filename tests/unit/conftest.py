from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from beanie import init_beanie
from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider
from fastapi import FastAPI
from httpx import ASGITransport

from notifyhub.core.database_context import Database
from notifyhub.core.metrics import SyncMetrics
from notifyhub.core.providers import (
    BroadcastProvider,
    LoggingProvider,
    MetricsProvider,
    NotificationServicesProvider,
    RecycleServicesProvider,
    RepositoryProvider,
    SettingsProvider,
)
from notifyhub.db.docs import ALL_DOCUMENTS
from notifyhub.db.repositories import (
    NotificationRepository,
    RecordRepository,
    UserNotificationRepository,
    UserRepository,
)
from notifyhub.main import create_app
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

from tests.helpers.fakes import FakeBoundaryClientProvider, FakeDatabaseProvider


@pytest_asyncio.fixture
async def unit_container(test_settings: Settings) -> AsyncGenerator[AsyncContainer, None]:
    """DI container for unit tests with fake boundary clients.

    Provides:
    - Fake Redis and MongoDB (boundary clients), fresh per test
    - Real metrics, repositories, services (internal)
    """
    container = make_async_container(
        SettingsProvider(),
        LoggingProvider(),
        FakeBoundaryClientProvider(),
        FakeDatabaseProvider(),
        MetricsProvider(),
        RepositoryProvider(),
        BroadcastProvider(),
        NotificationServicesProvider(),
        RecycleServicesProvider(),
        FastapiProvider(),
        context={Settings: test_settings},
    )

    db = await container.get(Database)
    await init_beanie(database=db, document_models=ALL_DOCUMENTS)

    yield container
    await container.close()


@pytest_asyncio.fixture
async def sync_metrics(unit_container: AsyncContainer) -> SyncMetrics:
    return await unit_container.get(SyncMetrics)


@pytest_asyncio.fixture
async def database(unit_container: AsyncContainer) -> Database:
    return await unit_container.get(Database)


@pytest_asyncio.fixture
async def user_repository(unit_container: AsyncContainer) -> UserRepository:
    return await unit_container.get(UserRepository)


@pytest_asyncio.fixture
async def notification_repository(unit_container: AsyncContainer) -> NotificationRepository:
    return await unit_container.get(NotificationRepository)


@pytest_asyncio.fixture
async def state_repository(unit_container: AsyncContainer) -> UserNotificationRepository:
    return await unit_container.get(UserNotificationRepository)


@pytest_asyncio.fixture
async def record_repository(unit_container: AsyncContainer) -> RecordRepository:
    return await unit_container.get(RecordRepository)


@pytest_asyncio.fixture
async def broadcaster(unit_container: AsyncContainer) -> RedisBroadcaster:
    return await unit_container.get(RedisBroadcaster)


@pytest_asyncio.fixture
async def fanout_engine(unit_container: AsyncContainer) -> FanOutEngine:
    return await unit_container.get(FanOutEngine)


@pytest_asyncio.fixture
async def list_engine(unit_container: AsyncContainer) -> ListMergeEngine:
    return await unit_container.get(ListMergeEngine)


@pytest_asyncio.fixture
async def coordinator(unit_container: AsyncContainer) -> ReconciliationCoordinator:
    return await unit_container.get(ReconciliationCoordinator)


@pytest_asyncio.fixture
async def notification_service(unit_container: AsyncContainer) -> NotificationService:
    return await unit_container.get(NotificationService)


@pytest_asyncio.fixture
async def snapshot_store(unit_container: AsyncContainer) -> SnapshotStore:
    return await unit_container.get(SnapshotStore)


@pytest_asyncio.fixture
async def recycle_service(unit_container: AsyncContainer) -> RecycleBinService:
    return await unit_container.get(RecycleBinService)


@pytest_asyncio.fixture
async def auto_delete_service(unit_container: AsyncContainer) -> AutoDeleteService:
    return await unit_container.get(AutoDeleteService)


@pytest_asyncio.fixture
async def live_sync(unit_container: AsyncContainer) -> LiveSyncService:
    return await unit_container.get(LiveSyncService)


@pytest.fixture
def app(unit_container: AsyncContainer, test_settings: Settings) -> FastAPI:
    """API app bound to the unit container; Beanie is already initialized, so lifespan is not needed."""
    return create_app(test_settings, container=unit_container)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test", timeout=10.0) as c:
        yield c
