from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from notifyhub.core.utils import utc_now
from notifyhub.domain.enums.notification import (
    AudienceMode,
    NotificationCategory,
    NotificationChannel,
    NotificationSeverity,
    NotificationType,
)


@dataclass
class NotificationAudience:
    mode: AudienceMode
    usernames: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)


@dataclass
class NotificationTarget:
    kind: NotificationCategory | None = None
    ref_id: str | None = None


@dataclass
class DomainNotificationCreate:
    """Author-supplied fields; category, defaults and derived type are filled in by the service."""

    title: str
    body: str
    audience: NotificationAudience
    severity: NotificationSeverity = NotificationSeverity.INFO
    type: NotificationType | None = None
    channels: list[str] = field(default_factory=list)
    target: NotificationTarget | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    icon: str | None = None
    link: str | None = None
    source: str | None = None


@dataclass
class DomainNotificationUpdate:
    title: str | None = None
    type: NotificationType | None = None
    body: str | None = None
    severity: NotificationSeverity | None = None
    target_kind: NotificationCategory | None = None


@dataclass
class DomainNotificationMaster:
    title: str
    category: NotificationCategory
    type: NotificationType
    body: str
    audience: NotificationAudience
    notification_id: str = field(default_factory=lambda: str(uuid4()))
    severity: NotificationSeverity = NotificationSeverity.INFO
    channels: list[NotificationChannel] = field(default_factory=lambda: [NotificationChannel.IN_APP])
    target: NotificationTarget = field(default_factory=NotificationTarget)
    created_at: datetime = field(default_factory=utc_now)
    expires_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    icon: str | None = None
    link: str | None = None
    source: str | None = None


@dataclass
class DomainUserNotificationState:
    username: str
    notification_id: str
    is_read: bool = False
    is_archived: bool = False
    delivered_at: datetime | None = None
    read_at: datetime | None = None


@dataclass
class NotificationView:
    """A master merged with the caller's private state."""

    master: DomainNotificationMaster
    state: DomainUserNotificationState


@dataclass
class NotificationListFilters:
    category: NotificationCategory | None = None
    titles: list[str] | None = None
    type: NotificationType | None = None
    severity: NotificationSeverity | None = None
    channel: NotificationChannel | None = None
    search: str | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    only_unread: bool = False


@dataclass
class Pagination:
    limit: int | None = None
    page: int | None = None
    skip: int | None = None

    def resolve(self, default_limit: int = 20) -> tuple[int, int]:
        """Return (offset, limit); page wins over the legacy skip value."""
        limit = max(1, self.limit if self.limit is not None else default_limit)
        if self.page is not None:
            offset = max(0, self.page) * limit
        elif self.skip is not None:
            offset = max(0, self.skip)
        else:
            offset = 0
        return offset, limit


@dataclass
class FanOutResult:
    notification_id: str
    matched_users: int = 0
    inserted: int = 0
    batches_flushed: int = 0
    batches_failed: int = 0


@dataclass
class ReconcileResult:
    username: str
    upserted: int = 0
    removed: int = 0
    archived: int = 0
