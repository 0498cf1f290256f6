from notifyhub.domain.notification.exceptions import (
    InvalidAudienceError,
    NoCategoryMappingError,
    NotificationNotFoundError,
    NotificationPermissionError,
)
from notifyhub.domain.notification.models import (
    DomainNotificationCreate,
    DomainNotificationMaster,
    DomainNotificationUpdate,
    DomainUserNotificationState,
    FanOutResult,
    NotificationAudience,
    NotificationListFilters,
    NotificationTarget,
    NotificationView,
    Pagination,
    ReconcileResult,
)

__all__ = [
    "DomainNotificationCreate",
    "DomainNotificationMaster",
    "DomainNotificationUpdate",
    "DomainUserNotificationState",
    "FanOutResult",
    "InvalidAudienceError",
    "NoCategoryMappingError",
    "NotificationAudience",
    "NotificationListFilters",
    "NotificationNotFoundError",
    "NotificationPermissionError",
    "NotificationTarget",
    "NotificationView",
    "Pagination",
    "ReconcileResult",
]
