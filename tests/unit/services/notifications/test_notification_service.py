from datetime import timedelta

import pytest
import pytest_asyncio

from notifyhub.core.utils import utc_now
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository, UserRepository
from notifyhub.domain.enums import (
    AudienceMode,
    BroadcastEvent,
    NotificationCategory,
    NotificationChannel,
    NotificationType,
    UserRole,
)
from notifyhub.domain.exceptions import ValidationError
from notifyhub.domain.notification import (
    DomainNotificationUpdate,
    InvalidAudienceError,
    NoCategoryMappingError,
    NotificationNotFoundError,
    NotificationPermissionError,
    NotificationTarget,
)
from notifyhub.domain.user import Principal
from notifyhub.services.broadcast import RedisBroadcaster
from notifyhub.services.notifications import NotificationService

from tests.helpers import make_create, make_master, seed_users

pytestmark = pytest.mark.unit

MANAGER = Principal(username="mgr", role=UserRole.MANAGER)
ALICE = Principal(username="alice", role=UserRole.TENANT)


@pytest_asyncio.fixture
async def directory(user_repository: UserRepository) -> None:
    await seed_users(
        user_repository,
        {"alice": UserRole.TENANT, "bob": UserRole.TENANT, "carol": UserRole.AGENT, "mgr": UserRole.MANAGER},
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_non_author_role_is_rejected(
        self, notification_service: NotificationService, notification_repository: NotificationRepository
    ) -> None:
        with pytest.raises(NotificationPermissionError):
            await notification_service.create_notification(ALICE, make_create())
        assert await notification_repository.count_notifications({}) == 0

    @pytest.mark.asyncio
    async def test_defaults_are_filled_in(self, directory: None, notification_service: NotificationService) -> None:
        master, result = await notification_service.create_notification(
            MANAGER, make_create(title=" New Lease ", body="  Unit 4 signed  ", channels=["fax"])
        )

        assert master.title == "New Lease"
        assert master.body == "Unit 4 signed"
        assert master.category == NotificationCategory.LEASE
        assert master.type == NotificationType.CREATE
        assert master.channels == [NotificationChannel.IN_APP]
        assert master.target == NotificationTarget(kind=NotificationCategory.LEASE)
        assert master.tags == ["lease", "agreement", "renewal", "payment"]
        assert master.icon == "description"
        assert result.matched_users == 4
        assert result.inserted == 4

    @pytest.mark.asyncio
    async def test_explicit_values_win(self, notification_service: NotificationService) -> None:
        create = make_create(title="Invoice Overdue", tags=["late", "late"], channels=["email", "sms"])
        create.type = NotificationType.REMINDER
        create.icon = "alarm"
        create.target = NotificationTarget(kind=NotificationCategory.LEASE, ref_id="l-7")

        master, _ = await notification_service.create_notification(MANAGER, create)

        assert master.type == NotificationType.REMINDER
        assert master.tags == ["late"]
        assert master.icon == "alarm"
        assert master.channels == [NotificationChannel.EMAIL, NotificationChannel.SMS]
        assert master.target == NotificationTarget(kind=NotificationCategory.LEASE, ref_id="l-7")

    @pytest.mark.asyncio
    async def test_role_targeted_create_reaches_only_that_role(
        self,
        directory: None,
        notification_service: NotificationService,
        state_repository: UserNotificationRepository,
    ) -> None:
        master, result = await notification_service.create_notification(
            MANAGER, make_create(mode=AudienceMode.ROLE, roles=["tenant"])
        )

        assert result.inserted == 2
        assert await state_repository.get_state("alice", master.notification_id) is not None
        assert await state_repository.get_state("carol", master.notification_id) is None

    @pytest.mark.asyncio
    async def test_blank_body_is_rejected(self, notification_service: NotificationService) -> None:
        with pytest.raises(ValidationError, match="body"):
            await notification_service.create_notification(MANAGER, make_create(body="   "))

    @pytest.mark.asyncio
    async def test_unknown_title_is_rejected(self, notification_service: NotificationService) -> None:
        with pytest.raises(NoCategoryMappingError):
            await notification_service.create_notification(MANAGER, make_create(title="Party Tonight"))

    @pytest.mark.asyncio
    async def test_empty_audience_is_rejected(self, notification_service: NotificationService) -> None:
        with pytest.raises(InvalidAudienceError):
            await notification_service.create_notification(MANAGER, make_create(mode=AudienceMode.USER))

    @pytest.mark.asyncio
    async def test_create_publishes_to_audience_rooms(
        self, notification_service: NotificationService, broadcaster: RedisBroadcaster
    ) -> None:
        subscription = await broadcaster.open_subscription("role:tenant")
        try:
            master, _ = await notification_service.create_notification(
                MANAGER, make_create(mode=AudienceMode.ROLE, roles=["tenant"])
            )
            message = None
            for _ in range(10):
                message = await subscription.get(timeout=0.2)
                if message is not None:
                    break
        finally:
            await subscription.close()

        assert message is not None
        assert message.event == BroadcastEvent.NOTIFICATION_NEW
        assert message.room == "role:tenant"
        assert message.payload["notification_id"] == master.notification_id


class TestUpdate:
    @pytest.mark.asyncio
    async def test_new_title_rederives_category_type_and_target(
        self, notification_service: NotificationService
    ) -> None:
        master, _ = await notification_service.create_notification(MANAGER, make_create(title="New Lease"))

        updated = await notification_service.update_notification(
            MANAGER, master.notification_id, DomainNotificationUpdate(title="Invoice Paid")
        )

        assert updated.category == NotificationCategory.PAYMENT
        assert updated.type == NotificationType.PAYMENT_RECEIVED
        assert updated.target.kind == NotificationCategory.PAYMENT
        assert updated.tags == master.tags

    @pytest.mark.asyncio
    async def test_body_only_update(self, notification_service: NotificationService) -> None:
        master, _ = await notification_service.create_notification(MANAGER, make_create())

        updated = await notification_service.update_notification(
            MANAGER, master.notification_id, DomainNotificationUpdate(body=" revised ")
        )

        assert updated.body == "revised"
        assert updated.category == master.category

    @pytest.mark.asyncio
    async def test_missing_master(self, notification_service: NotificationService) -> None:
        with pytest.raises(NotificationNotFoundError):
            await notification_service.update_notification(MANAGER, "nope", DomainNotificationUpdate(body="x"))

    @pytest.mark.asyncio
    async def test_reader_cannot_update(self, notification_service: NotificationService) -> None:
        with pytest.raises(NotificationPermissionError):
            await notification_service.update_notification(ALICE, "any", DomainNotificationUpdate(body="x"))


class TestReaderState:
    @pytest.mark.asyncio
    async def test_mark_read_is_idempotent(self, directory: None, notification_service: NotificationService) -> None:
        master, _ = await notification_service.create_notification(MANAGER, make_create())

        assert await notification_service.mark_read(ALICE, master.notification_id) is True
        assert await notification_service.mark_read(ALICE, master.notification_id) is False

    @pytest.mark.asyncio
    async def test_mark_read_on_invisible_master_is_not_found(
        self, notification_service: NotificationService
    ) -> None:
        master, _ = await notification_service.create_notification(
            MANAGER, make_create(mode=AudienceMode.USER, usernames=["bob"])
        )

        with pytest.raises(NotificationNotFoundError):
            await notification_service.mark_read(ALICE, master.notification_id)

    @pytest.mark.asyncio
    async def test_unread_count(
        self,
        notification_service: NotificationService,
        notification_repository: NotificationRepository,
    ) -> None:
        first, _ = await notification_service.create_notification(MANAGER, make_create())
        await notification_service.create_notification(MANAGER, make_create(title="New Tenant"))
        await notification_service.create_notification(MANAGER, make_create(mode=AudienceMode.ROLE, roles=["agent"]))
        await notification_repository.create_notification(make_master(expires_at=utc_now() - timedelta(minutes=5)))

        assert await notification_service.unread_count(ALICE) == 2
        await notification_service.mark_read(ALICE, first.notification_id)
        assert await notification_service.unread_count(ALICE) == 1

    @pytest.mark.asyncio
    async def test_mark_all_read_then_list(self, directory: None, notification_service: NotificationService) -> None:
        for title in ("New Lease", "New Tenant", "Invoice Paid"):
            await notification_service.create_notification(MANAGER, make_create(title=title))

        assert await notification_service.mark_all_read(ALICE) == 3
        views = await notification_service.list_notifications(ALICE)
        assert all(v.state.is_read for v in views)
        assert await notification_service.unread_count(ALICE) == 0

    @pytest.mark.asyncio
    async def test_archive_materializes_row(
        self,
        notification_service: NotificationService,
        state_repository: UserNotificationRepository,
    ) -> None:
        master, _ = await notification_service.create_notification(MANAGER, make_create())

        assert await notification_service.archive(ALICE, master.notification_id) is True
        state = await state_repository.get_state("alice", master.notification_id)
        assert state is not None
        assert state.is_archived is True

    @pytest.mark.asyncio
    async def test_remove_only_touches_caller_rows(
        self,
        directory: None,
        notification_service: NotificationService,
        notification_repository: NotificationRepository,
        state_repository: UserNotificationRepository,
    ) -> None:
        master, _ = await notification_service.create_notification(MANAGER, make_create())

        assert await notification_service.remove_for_user(ALICE, [master.notification_id, ""]) == 1
        assert await state_repository.get_state("bob", master.notification_id) is not None
        assert await notification_repository.get_notification(master.notification_id) is not None
        assert await notification_service.remove_for_user(ALICE, []) == 0
        assert await notification_service.remove_all_for_user(Principal("bob", UserRole.TENANT)) == 1
