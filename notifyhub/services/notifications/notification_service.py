import logging
from typing import Any

from notifyhub.core.metrics import NotificationMetrics
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository
from notifyhub.domain.enums.user import NOTIFICATION_CREATOR_ROLES
from notifyhub.domain.exceptions import ValidationError
from notifyhub.domain.notification import (
    DomainNotificationCreate,
    DomainNotificationMaster,
    DomainNotificationUpdate,
    FanOutResult,
    NotificationListFilters,
    NotificationNotFoundError,
    NotificationPermissionError,
    NotificationTarget,
    NotificationView,
    Pagination,
)
from notifyhub.domain.notification import catalog
from notifyhub.domain.user import Principal
from notifyhub.services.notifications.audience import can_view, normalize_audience, visibility_filter
from notifyhub.services.notifications.list_merge import ListMergeEngine
from notifyhub.services.notifications.reconciliation import ReconciliationCoordinator


class NotificationService:
    """Entry point for authors and readers of notifications."""

    def __init__(
        self,
        notification_repository: NotificationRepository,
        state_repository: UserNotificationRepository,
        list_engine: ListMergeEngine,
        coordinator: ReconciliationCoordinator,
        metrics: NotificationMetrics,
        logger: logging.Logger,
    ) -> None:
        self.repository = notification_repository
        self.states = state_repository
        self.list_engine = list_engine
        self.coordinator = coordinator
        self.metrics = metrics
        self.logger = logger

    async def create_notification(
        self, principal: Principal, create: DomainNotificationCreate
    ) -> tuple[DomainNotificationMaster, FanOutResult]:
        if principal.role not in NOTIFICATION_CREATOR_ROLES:
            raise NotificationPermissionError(str(principal.role))

        body = (create.body or "").strip()
        if not body:
            raise ValidationError("Notification body is required")

        title = create.title.strip()
        audience = normalize_audience(create.audience)
        category = catalog.derive_category(title)
        target = create.target or NotificationTarget()

        master = DomainNotificationMaster(
            title=title,
            category=category,
            type=create.type or catalog.derive_type(title),
            body=body,
            audience=audience,
            severity=create.severity,
            channels=catalog.sanitize_channels(create.channels),
            target=NotificationTarget(kind=target.kind or category, ref_id=target.ref_id),
            expires_at=create.expires_at,
            metadata=dict(create.metadata or {}),
            tags=catalog.cap_tags(create.tags) or catalog.default_tags(category),
            icon=create.icon or catalog.default_icon(category),
            link=create.link,
            source=create.source,
        )
        master = await self.repository.create_notification(master)
        self.metrics.record_notification_created(str(category), str(master.severity))
        self.logger.info(
            "Notification created",
            extra={
                "notification_id": master.notification_id,
                "title": master.title,
                "category": str(category),
                "audience_mode": str(audience.mode),
                "author": principal.username,
            },
        )

        result = await self.coordinator.on_master_created(master)
        return master, result

    async def update_notification(
        self, principal: Principal, notification_id: str, update: DomainNotificationUpdate
    ) -> DomainNotificationMaster:
        """Patch mutable content; a new title re-derives category, type and target kind."""
        if principal.role not in NOTIFICATION_CREATOR_ROLES:
            raise NotificationPermissionError(str(principal.role))

        master = await self.repository.get_notification(notification_id)
        if master is None:
            raise NotificationNotFoundError(notification_id)

        fields: dict[str, Any] = {}
        if update.body is not None:
            body = update.body.strip()
            if not body:
                raise ValidationError("Notification body is required")
            fields["body"] = body
        if update.severity is not None:
            fields["severity"] = update.severity

        if update.title is not None:
            title = update.title.strip()
            category = catalog.derive_category(title)
            fields["title"] = title
            fields["category"] = category
            fields["type"] = update.type or catalog.derive_type(title)
            fields["target.kind"] = update.target_kind or category
        else:
            if update.type is not None:
                fields["type"] = update.type
            if update.target_kind is not None:
                fields["target.kind"] = update.target_kind

        updated = await self.repository.update_notification(notification_id, fields)
        if updated is None:
            raise NotificationNotFoundError(notification_id)
        return updated

    async def list_notifications(
        self,
        principal: Principal,
        filters: NotificationListFilters | None = None,
        pagination: Pagination | None = None,
    ) -> list[NotificationView]:
        return await self.list_engine.list_for_user(principal.username, principal.role, filters, pagination)

    async def mark_read(self, principal: Principal, notification_id: str) -> bool:
        master = await self._get_visible(principal, notification_id)
        changed = await self.states.mark_read(principal.username, notification_id)
        if changed:
            self.metrics.record_notification_read(str(master.category))
        return changed

    async def mark_all_read(self, principal: Principal) -> int:
        return await self.states.mark_all_read(principal.username)

    async def archive(self, principal: Principal, notification_id: str) -> bool:
        await self._get_visible(principal, notification_id)
        await self.states.ensure_states(principal.username, [notification_id])
        return await self.states.archive(principal.username, notification_id)

    async def archive_all(self, principal: Principal) -> int:
        return await self.states.archive_all(principal.username)

    async def unread_count(self, principal: Principal) -> int:
        """Visible, unexpired masters the caller has not read (a missing row counts as unread)."""
        clauses = [NotificationRepository.not_expired_clause()]
        visibility = visibility_filter(principal.username, principal.role)
        if visibility:
            clauses.append(visibility)
        ids = [nid async for nid in self.repository.iter_notification_ids({"$and": clauses})]
        if not ids:
            return 0
        return len(ids) - await self.states.count_read(principal.username, ids)

    async def remove_all_for_user(self, principal: Principal) -> int:
        return await self.states.delete_for_user(principal.username)

    async def remove_for_user(self, principal: Principal, notification_ids: list[str]) -> int:
        ids = [nid for nid in dict.fromkeys(notification_ids) if nid]
        if not ids:
            return 0
        return await self.states.delete_for_user(principal.username, ids)

    async def _get_visible(self, principal: Principal, notification_id: str) -> DomainNotificationMaster:
        master = await self.repository.get_notification(notification_id)
        if master is None or not can_view(master.audience, principal.username, principal.role):
            raise NotificationNotFoundError(notification_id)
        return master
