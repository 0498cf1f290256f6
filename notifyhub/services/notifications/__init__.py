from notifyhub.services.notifications.fanout import FanOutEngine
from notifyhub.services.notifications.list_merge import ListMergeEngine
from notifyhub.services.notifications.notification_service import NotificationService
from notifyhub.services.notifications.reconciliation import ReconciliationCoordinator

__all__ = [
    "FanOutEngine",
    "ListMergeEngine",
    "NotificationService",
    "ReconciliationCoordinator",
]
