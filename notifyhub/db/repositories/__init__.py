from notifyhub.db.repositories.notification_repository import NotificationRepository
from notifyhub.db.repositories.record_repository import RecordRepository
from notifyhub.db.repositories.user_notification_repository import UserNotificationRepository
from notifyhub.db.repositories.user_repository import UserRepository

__all__ = [
    "NotificationRepository",
    "RecordRepository",
    "UserNotificationRepository",
    "UserRepository",
]
