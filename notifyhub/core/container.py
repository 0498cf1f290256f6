from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from notifyhub.core.providers import (
    BroadcastProvider,
    DatabaseProvider,
    LoggingProvider,
    MetricsProvider,
    NotificationServicesProvider,
    RecycleServicesProvider,
    RedisProvider,
    RepositoryProvider,
    SettingsProvider,
)
from notifyhub.settings import Settings


def create_app_container(settings: Settings) -> AsyncContainer:
    """
    Create the application DI container.
    """
    return make_async_container(
        SettingsProvider(),
        LoggingProvider(),
        DatabaseProvider(),
        RedisProvider(),
        MetricsProvider(),
        RepositoryProvider(),
        BroadcastProvider(),
        NotificationServicesProvider(),
        RecycleServicesProvider(),
        FastapiProvider(),
        context={Settings: settings},
    )


def create_live_sync_container(settings: Settings) -> AsyncContainer:
    """
    Create a minimal DI container for the live sync worker (no HTTP layer).
    """
    return make_async_container(
        SettingsProvider(),
        LoggingProvider(),
        DatabaseProvider(),
        RedisProvider(),
        MetricsProvider(),
        RepositoryProvider(),
        BroadcastProvider(),
        NotificationServicesProvider(),
        context={Settings: settings},
    )


def create_auto_delete_container(settings: Settings) -> AsyncContainer:
    """
    Create a minimal DI container for the auto-delete worker (no HTTP layer).
    """
    return make_async_container(
        SettingsProvider(),
        LoggingProvider(),
        DatabaseProvider(),
        RedisProvider(),
        MetricsProvider(),
        RepositoryProvider(),
        BroadcastProvider(),
        NotificationServicesProvider(),
        RecycleServicesProvider(),
        context={Settings: settings},
    )
