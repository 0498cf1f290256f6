from datetime import datetime
from typing import Any
from uuid import uuid4

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from notifyhub.core.utils import utc_now
from notifyhub.domain.enums import (
    AudienceMode,
    NotificationCategory,
    NotificationChannel,
    NotificationSeverity,
    NotificationType,
)


class AudienceDoc(BaseModel):
    mode: AudienceMode
    usernames: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)


class TargetDoc(BaseModel):
    kind: NotificationCategory | None = None
    ref_id: str | None = None


class NotificationMasterDocument(Document):
    """Shared notification content, written once per notification."""

    notification_id: Indexed(str, unique=True) = Field(default_factory=lambda: str(uuid4()))  # type: ignore[valid-type]
    title: str
    category: NotificationCategory
    type: NotificationType = NotificationType.NOTIFY
    severity: NotificationSeverity = NotificationSeverity.INFO
    body: str

    target: TargetDoc = Field(default_factory=TargetDoc)
    audience: AudienceDoc
    channels: list[NotificationChannel] = Field(default_factory=lambda: [NotificationChannel.IN_APP])

    icon: str | None = None
    tags: list[str] = Field(default_factory=list)
    link: str | None = None
    source: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    class Settings:
        name = "notifications"
        use_state_management = True
        indexes = [
            IndexModel([("title", ASCENDING), ("created_at", DESCENDING)], name="idx_master_title_created"),
            IndexModel(
                [("category", ASCENDING), ("type", ASCENDING), ("created_at", DESCENDING)],
                name="idx_master_category_type_created",
            ),
            IndexModel([("audience.mode", ASCENDING), ("created_at", DESCENDING)], name="idx_master_mode_created"),
            IndexModel(
                [("audience.usernames", ASCENDING), ("created_at", DESCENDING)], name="idx_master_usernames_created"
            ),
            IndexModel([("audience.roles", ASCENDING), ("created_at", DESCENDING)], name="idx_master_roles_created"),
            IndexModel([("severity", ASCENDING), ("created_at", DESCENDING)], name="idx_master_severity_created"),
            IndexModel([("tags", ASCENDING), ("created_at", DESCENDING)], name="idx_master_tags_created"),
            IndexModel([("target.ref_id", ASCENDING), ("created_at", DESCENDING)], name="idx_master_target_ref"),
            IndexModel([("expires_at", ASCENDING)], name="idx_master_expires"),
        ]


class UserNotificationStateDocument(Document):
    """One user's private read/archive state for one notification master."""

    username: Indexed(str)  # type: ignore[valid-type]
    notification_id: Indexed(str)  # type: ignore[valid-type]
    is_read: bool = False
    is_archived: bool = False
    delivered_at: datetime = Field(default_factory=utc_now)
    read_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    class Settings:
        name = "user_notifications"
        use_state_management = True
        indexes = [
            IndexModel(
                [("username", ASCENDING), ("notification_id", ASCENDING)],
                name="idx_state_user_notification_unique",
                unique=True,
            ),
            IndexModel(
                [("username", ASCENDING), ("is_read", ASCENDING), ("delivered_at", DESCENDING)],
                name="idx_state_user_read_delivered",
            ),
        ]
