from datetime import timedelta

import pytest
import pytest_asyncio

from notifyhub.core.utils import utc_now
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository, UserRepository
from notifyhub.domain.enums import AudienceMode, UserRole
from notifyhub.domain.exceptions import NotFoundError
from notifyhub.domain.notification import DomainNotificationMaster, NotificationNotFoundError
from notifyhub.domain.user import User
from notifyhub.services.notifications import ReconciliationCoordinator

from tests.helpers import make_master, seed_users

pytestmark = pytest.mark.unit

ALICE = User(username="alice", role=UserRole.TENANT)


@pytest_asyncio.fixture
async def masters(
    user_repository: UserRepository,
    notification_repository: NotificationRepository,
    state_repository: UserNotificationRepository,
) -> dict[str, DomainNotificationMaster]:
    """Alice, a tenant, holds rows for everything a tenant could ever see."""
    await seed_users(user_repository, {"alice": UserRole.TENANT, "bob": UserRole.AGENT})

    expired = utc_now() - timedelta(hours=1)
    stored = {
        "broadcast": make_master(mode=AudienceMode.BROADCAST),
        "tenants": make_master(mode=AudienceMode.ROLE, roles=["tenant"]),
        "agents": make_master(mode=AudienceMode.ROLE, roles=["agent"]),
        "direct": make_master(mode=AudienceMode.USER, usernames=["alice"]),
        "tenants_expired": make_master(mode=AudienceMode.ROLE, roles=["tenant"], expires_at=expired),
        "agents_expired": make_master(mode=AudienceMode.ROLE, roles=["agent"], expires_at=expired),
    }
    for master in stored.values():
        await notification_repository.create_notification(master)

    held = ["broadcast", "tenants", "direct", "tenants_expired"]
    await state_repository.ensure_states("alice", [stored[k].notification_id for k in held])
    return stored


@pytest.mark.asyncio
async def test_role_change_upserts_new_scope_and_removes_stale(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    state_repository: UserNotificationRepository,
) -> None:
    result = await coordinator.on_user_role_changed(ALICE, UserRole.AGENT, remove_stale=True)

    assert result.upserted == 1
    assert result.removed == 2
    held = await state_repository.list_notification_ids("alice")
    assert held == {masters[k].notification_id for k in ("broadcast", "agents", "direct")}


@pytest.mark.asyncio
async def test_role_change_keeps_expired_rows_still_in_scope(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    state_repository: UserNotificationRepository,
) -> None:
    # Re-asserting the current role removes nothing, expired tenant master included
    result = await coordinator.on_user_role_changed(ALICE, UserRole.TENANT, remove_stale=True)

    assert result.removed == 0
    assert masters["tenants_expired"].notification_id in await state_repository.list_notification_ids("alice")


@pytest.mark.asyncio
async def test_role_change_without_removal(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    state_repository: UserNotificationRepository,
) -> None:
    result = await coordinator.on_user_role_changed(ALICE, UserRole.AGENT, remove_stale=False)

    assert result.removed == 0
    assert await state_repository.count_states("alice") == 5


@pytest.mark.asyncio
async def test_change_user_role_updates_directory(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    user_repository: UserRepository,
) -> None:
    result = await coordinator.change_user_role("alice", UserRole.AGENT, remove_stale=True)

    user = await user_repository.get_user("alice")
    assert user is not None
    assert user.role == UserRole.AGENT
    assert result.removed == 2


@pytest.mark.asyncio
async def test_activation_materializes_visible_rows(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    state_repository: UserNotificationRepository,
) -> None:
    result = await coordinator.on_user_activated(User(username="bob", role=UserRole.AGENT))

    assert result.upserted == 2
    assert await state_repository.list_notification_ids("bob") == {
        masters["broadcast"].notification_id,
        masters["agents"].notification_id,
    }


@pytest.mark.asyncio
async def test_deactivate_and_reactivate(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    user_repository: UserRepository,
    state_repository: UserNotificationRepository,
) -> None:
    deactivated = await coordinator.set_user_active("alice", False)
    assert deactivated.archived == 4
    state = await state_repository.get_state("alice", masters["broadcast"].notification_id)
    assert state is not None
    assert state.is_archived is True
    user = await user_repository.get_user("alice")
    assert user is not None
    assert user.is_active is False

    reactivated = await coordinator.set_user_active("alice", True)
    assert reactivated.upserted == 0
    assert (await user_repository.get_user("alice")).is_active is True  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_unknown_user(coordinator: ReconciliationCoordinator) -> None:
    with pytest.raises(NotFoundError):
        await coordinator.set_user_active("ghost", True)


@pytest.mark.asyncio
async def test_backfill_for_notification(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    state_repository: UserNotificationRepository,
) -> None:
    result = await coordinator.backfill_for_notification(masters["agents"].notification_id)

    assert result.matched_users == 1
    assert result.inserted == 1
    assert await state_repository.get_state("bob", masters["agents"].notification_id) is not None

    with pytest.raises(NotificationNotFoundError):
        await coordinator.backfill_for_notification("missing")


@pytest.mark.asyncio
async def test_prune_orphans(
    masters: dict[str, DomainNotificationMaster],
    coordinator: ReconciliationCoordinator,
    notification_repository: NotificationRepository,
    state_repository: UserNotificationRepository,
) -> None:
    await notification_repository.delete_notification(masters["direct"].notification_id)

    assert await coordinator.prune_orphans() == 1
    assert await coordinator.prune_orphans() == 0
    assert await state_repository.count_states("alice") == 3
