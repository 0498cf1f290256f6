from notifyhub.domain.enums.notification import (
    AudienceMode,
    BroadcastEvent,
    NotificationCategory,
    NotificationChannel,
    NotificationSeverity,
    NotificationTitle,
    NotificationType,
)
from notifyhub.domain.enums.user import UserRole

__all__ = [
    "AudienceMode",
    "BroadcastEvent",
    "NotificationCategory",
    "NotificationChannel",
    "NotificationSeverity",
    "NotificationTitle",
    "NotificationType",
    "UserRole",
]
