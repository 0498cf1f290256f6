import asyncio
from datetime import timedelta

import pytest

from notifyhub.core.utils import utc_now
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository
from notifyhub.domain.enums import (
    AudienceMode,
    NotificationCategory,
    NotificationSeverity,
    NotificationType,
    UserRole,
)
from notifyhub.domain.notification import (
    DomainNotificationMaster,
    DomainUserNotificationState,
    NoCategoryMappingError,
    NotificationAudience,
    NotificationListFilters,
    Pagination,
)
from notifyhub.services.notifications import ListMergeEngine

from tests.helpers import make_master

pytestmark = pytest.mark.unit


async def _store(repository: NotificationRepository, **kwargs: object) -> DomainNotificationMaster:
    return await repository.create_notification(make_master(**kwargs))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_listing_self_heals_missing_rows(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
    state_repository: UserNotificationRepository,
) -> None:
    master = await _store(notification_repository)

    views = await list_engine.list_for_user("alice", UserRole.TENANT)

    assert [v.master.notification_id for v in views] == [master.notification_id]
    assert views[0].state.is_read is False
    assert views[0].state.username == "alice"
    assert await state_repository.get_state("alice", master.notification_id) is not None


@pytest.mark.asyncio
async def test_newest_first_with_pagination(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    now = utc_now()
    stored = [await _store(notification_repository, created_at=now - timedelta(minutes=i)) for i in range(5)]

    first = await list_engine.list_for_user("alice", UserRole.TENANT, pagination=Pagination(limit=2, page=0))
    second = await list_engine.list_for_user("alice", UserRole.TENANT, pagination=Pagination(limit=2, page=1))
    legacy = await list_engine.list_for_user("alice", UserRole.TENANT, pagination=Pagination(limit=2, skip=4))

    assert [v.master.notification_id for v in first] == [m.notification_id for m in stored[:2]]
    assert [v.master.notification_id for v in second] == [m.notification_id for m in stored[2:4]]
    assert [v.master.notification_id for v in legacy] == [stored[4].notification_id]


@pytest.mark.asyncio
async def test_visibility_by_audience(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    to_alice = await _store(notification_repository, mode=AudienceMode.USER, usernames=["alice"])
    to_bob = await _store(notification_repository, mode=AudienceMode.USER, usernames=["bob"])
    to_agents = await _store(notification_repository, mode=AudienceMode.ROLE, roles=["agent"])

    alice_ids = {v.master.notification_id for v in await list_engine.list_for_user("alice", UserRole.TENANT)}
    admin_ids = {v.master.notification_id for v in await list_engine.list_for_user("root", UserRole.ADMIN)}

    assert alice_ids == {to_alice.notification_id}
    assert admin_ids == {to_alice.notification_id, to_bob.notification_id, to_agents.notification_id}


@pytest.mark.asyncio
async def test_expired_masters_are_hidden_from_everyone(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    await _store(notification_repository, expires_at=utc_now() - timedelta(hours=1))
    live = await _store(notification_repository, expires_at=utc_now() + timedelta(hours=1))

    for username, role in (("alice", UserRole.TENANT), ("root", UserRole.ADMIN)):
        views = await list_engine.list_for_user(username, role)
        assert [v.master.notification_id for v in views] == [live.notification_id]


@pytest.mark.asyncio
async def test_concurrent_listings_heal_each_row_once(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
    state_repository: UserNotificationRepository,
) -> None:
    masters = [await _store(notification_repository) for _ in range(4)]

    first, second = await asyncio.gather(
        list_engine.list_for_user("alice", UserRole.TENANT),
        list_engine.list_for_user("alice", UserRole.TENANT),
    )

    assert len(first) == len(second) == 4
    assert await state_repository.count_states("alice") == 4
    assert await state_repository.list_notification_ids("alice") == {m.notification_id for m in masters}


@pytest.mark.asyncio
async def test_only_unread(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
    state_repository: UserNotificationRepository,
) -> None:
    read = await _store(notification_repository)
    unread = await _store(notification_repository, title="New Tenant")
    await state_repository.mark_read("alice", read.notification_id)

    views = await list_engine.list_for_user("alice", UserRole.TENANT, NotificationListFilters(only_unread=True))

    assert [v.master.notification_id for v in views] == [unread.notification_id]


@pytest.mark.asyncio
async def test_filters(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    lease = await _store(notification_repository, title="Lease Renewed", tags=["rent"])
    tenant = await _store(notification_repository, title="New Tenant", body="Welcome aboard (unit 4)")
    await _store(notification_repository, title="Security Alert")

    async def ids(filters: NotificationListFilters) -> set[str]:
        return {v.master.notification_id for v in await list_engine.list_for_user("alice", UserRole.TENANT, filters)}

    assert await ids(NotificationListFilters(category=NotificationCategory.LEASE)) == {lease.notification_id}
    assert await ids(NotificationListFilters(type=NotificationType.CREATE)) == {tenant.notification_id}
    assert await ids(NotificationListFilters(titles=["Lease Renewed", "New Tenant"])) == {
        lease.notification_id,
        tenant.notification_id,
    }
    assert await ids(NotificationListFilters(search="RENT")) == {lease.notification_id}
    assert await ids(NotificationListFilters(search="(unit 4)")) == {tenant.notification_id}
    assert await ids(NotificationListFilters(severity=NotificationSeverity.ERROR)) == set()


@pytest.mark.asyncio
async def test_created_window(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    now = utc_now()
    await _store(notification_repository, created_at=now - timedelta(days=3))
    recent = await _store(notification_repository, created_at=now - timedelta(hours=1))

    views = await list_engine.list_for_user(
        "alice",
        UserRole.TENANT,
        NotificationListFilters(created_after=now - timedelta(days=1), created_before=now),
    )

    assert [v.master.notification_id for v in views] == [recent.notification_id]


@pytest.mark.asyncio
async def test_master_with_retired_title_aborts_listing(
    list_engine: ListMergeEngine,
    notification_repository: NotificationRepository,
) -> None:
    await notification_repository.create_notification(
        DomainNotificationMaster(
            title="Retired Title",
            category=NotificationCategory.SYSTEM,
            type=NotificationType.NOTIFY,
            body="legacy",
            audience=NotificationAudience(mode=AudienceMode.BROADCAST),
        )
    )

    with pytest.raises(NoCategoryMappingError):
        await list_engine.list_for_user("alice", UserRole.TENANT)


class TestMerge:
    def test_missing_state_is_synthesized(self) -> None:
        master = make_master()
        views = ListMergeEngine.merge("alice", [master], [], only_unread=False)
        assert views[0].state.delivered_at == master.created_at
        assert views[0].state.is_read is False

    def test_only_unread_drops_read_but_keeps_missing_as_unread(self) -> None:
        read, unread, missing = make_master(), make_master(), make_master()
        states = [
            DomainUserNotificationState(username="alice", notification_id=read.notification_id, is_read=True),
            DomainUserNotificationState(username="alice", notification_id=unread.notification_id),
        ]
        views = ListMergeEngine.merge("alice", [read, unread, missing], states, only_unread=True)
        assert [v.master for v in views] == [unread, missing]
        assert views[1].state.is_read is False
        assert views[1].state.delivered_at == missing.created_at
