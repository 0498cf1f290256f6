from notifyhub.core.metrics.base import BaseMetrics
from notifyhub.core.metrics.notifications import NotificationMetrics
from notifyhub.core.metrics.recycle import RecycleMetrics
from notifyhub.core.metrics.sync import SyncMetrics

__all__ = [
    "BaseMetrics",
    "NotificationMetrics",
    "RecycleMetrics",
    "SyncMetrics",
]
