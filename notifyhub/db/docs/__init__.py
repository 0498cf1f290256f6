from notifyhub.db.docs.notification import (
    AudienceDoc,
    NotificationMasterDocument,
    TargetDoc,
    UserNotificationStateDocument,
)
from notifyhub.db.docs.user import UserDocument

# All document classes that need to be initialized with Beanie
ALL_DOCUMENTS = [
    UserDocument,
    NotificationMasterDocument,
    UserNotificationStateDocument,
]

__all__ = [
    "ALL_DOCUMENTS",
    "AudienceDoc",
    "NotificationMasterDocument",
    "TargetDoc",
    "UserDocument",
    "UserNotificationStateDocument",
]
