from datetime import UTC, datetime, timedelta

import pytest

from notifyhub.db.repositories import NotificationRepository
from notifyhub.domain.enums import AudienceMode, NotificationCategory

from tests.helpers import make_master

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_create_and_get(notification_repository: NotificationRepository) -> None:
    master = make_master(mode=AudienceMode.ROLE, roles=["tenant"], tags=["rent"])

    await notification_repository.create_notification(master)
    got = await notification_repository.get_notification(master.notification_id)

    assert got is not None
    assert got.title == "New Lease"
    assert got.audience.roles == ["tenant"]
    assert got.tags == ["rent"]
    assert await notification_repository.get_notification("missing") is None


@pytest.mark.asyncio
async def test_update_sets_nested_target(notification_repository: NotificationRepository) -> None:
    master = make_master()
    await notification_repository.create_notification(master)

    updated = await notification_repository.update_notification(
        master.notification_id, {"body": "Edited", "target.kind": NotificationCategory.PAYMENT}
    )

    assert updated is not None
    assert updated.body == "Edited"
    assert updated.target.kind == NotificationCategory.PAYMENT
    assert await notification_repository.update_notification("missing", {"body": "x"}) is None


@pytest.mark.asyncio
async def test_find_is_newest_first(notification_repository: NotificationRepository) -> None:
    base = datetime(2024, 1, 1, tzinfo=UTC)
    masters = [make_master(created_at=base + timedelta(minutes=i)) for i in range(3)]
    for master in masters:
        await notification_repository.create_notification(master)

    page = await notification_repository.find_notifications({}, offset=1, limit=5)

    assert [m.notification_id for m in page] == [masters[1].notification_id, masters[0].notification_id]
    assert await notification_repository.count_notifications({}) == 3


@pytest.mark.asyncio
async def test_not_expired_clause(notification_repository: NotificationRepository) -> None:
    now = datetime.now(UTC)
    live = make_master()
    future = make_master(expires_at=now + timedelta(days=1))
    past = make_master(expires_at=now - timedelta(days=1))
    for master in (live, future, past):
        await notification_repository.create_notification(master)

    ids = {nid async for nid in notification_repository.iter_notification_ids(NotificationRepository.not_expired_clause())}

    assert ids == {live.notification_id, future.notification_id}


@pytest.mark.asyncio
async def test_delete(notification_repository: NotificationRepository) -> None:
    master = make_master()
    await notification_repository.create_notification(master)

    assert await notification_repository.delete_notification(master.notification_id) is True
    assert await notification_repository.delete_notification(master.notification_id) is False
