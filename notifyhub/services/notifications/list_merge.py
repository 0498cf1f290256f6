import logging
import re
import time

from notifyhub.core.database_context import MongoDocument
from notifyhub.core.metrics import NotificationMetrics
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository
from notifyhub.domain.enums import UserRole
from notifyhub.domain.notification import (
    DomainNotificationMaster,
    DomainUserNotificationState,
    NotificationListFilters,
    NotificationView,
    Pagination,
)
from notifyhub.domain.notification.catalog import derive_category
from notifyhub.services.notifications.audience import visibility_filter
from notifyhub.settings import Settings


def build_list_query(username: str, role: UserRole | str, filters: NotificationListFilters) -> MongoDocument:
    """Visibility, expiry and the optional caller filters, AND-combined."""
    clauses: list[MongoDocument] = [NotificationRepository.not_expired_clause()]

    visibility = visibility_filter(username, role)
    if visibility:
        clauses.append(visibility)

    if filters.category:
        clauses.append({"category": filters.category.value})
    if filters.titles:
        clauses.append({"title": {"$in": list(filters.titles)}})
    if filters.type:
        clauses.append({"type": filters.type.value})
    if filters.severity:
        clauses.append({"severity": filters.severity.value})
    if filters.channel:
        clauses.append({"channels": filters.channel.value})

    search = (filters.search or "").strip()
    if search:
        pattern = re.escape(search)
        clauses.append(
            {
                "$or": [
                    {"title": {"$regex": pattern, "$options": "i"}},
                    {"body": {"$regex": pattern, "$options": "i"}},
                    {"tags": {"$regex": pattern, "$options": "i"}},
                ]
            }
        )

    window: MongoDocument = {}
    if filters.created_after:
        window["$gte"] = filters.created_after
    if filters.created_before:
        window["$lte"] = filters.created_before
    if window:
        clauses.append({"created_at": window})

    return {"$and": clauses}


class ListMergeEngine:
    """Builds a user's notification page: masters merged with private state.

    Every master on the page gets its state row materialized before state is
    read back, so a page never carries a master without a paired state.
    """

    def __init__(
        self,
        notification_repository: NotificationRepository,
        state_repository: UserNotificationRepository,
        settings: Settings,
        metrics: NotificationMetrics,
        logger: logging.Logger,
    ) -> None:
        self.notifications = notification_repository
        self.states = state_repository
        self.default_limit = settings.LIST_DEFAULT_LIMIT
        self.metrics = metrics
        self.logger = logger

    async def list_for_user(
        self,
        username: str,
        role: UserRole | str,
        filters: NotificationListFilters | None = None,
        pagination: Pagination | None = None,
    ) -> list[NotificationView]:
        start = time.monotonic()
        filters = filters or NotificationListFilters()
        offset, limit = (pagination or Pagination()).resolve(self.default_limit)

        query = build_list_query(username, role, filters)
        masters = await self.notifications.find_notifications(query, offset, limit)
        if not masters:
            self.metrics.record_list(returned=0, healed=0, duration_seconds=time.monotonic() - start)
            return []

        # Legacy masters whose title fell out of the catalog abort the page
        for master in masters:
            derive_category(master.title)

        ids = [m.notification_id for m in masters]
        healed = await self.states.ensure_states(username, ids)
        if healed:
            self.logger.debug("Self-healed notification state rows", extra={"username": username, "rows": healed})

        states = await self.states.find_states(username, ids)
        views = self.merge(username, masters, states, filters.only_unread)

        self.metrics.record_list(returned=len(views), healed=healed, duration_seconds=time.monotonic() - start)
        return views

    @staticmethod
    def merge(
        username: str,
        masters: list[DomainNotificationMaster],
        states: list[DomainUserNotificationState],
        only_unread: bool,
    ) -> list[NotificationView]:
        by_id = {s.notification_id: s for s in states}
        views: list[NotificationView] = []
        for master in masters:
            state = by_id.get(master.notification_id)
            if state is None:
                state = DomainUserNotificationState(
                    username=username,
                    notification_id=master.notification_id,
                    delivered_at=master.created_at,
                )
            elif only_unread and state.is_read:
                continue
            views.append(NotificationView(master=master, state=state))
        return views
