from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from notifyhub.core.utils import format_timestamp
from notifyhub.domain.enums import (
    AudienceMode,
    NotificationCategory,
    NotificationChannel,
    NotificationSeverity,
    NotificationType,
)
from notifyhub.domain.notification import (
    DomainNotificationMaster,
    FanOutResult,
    NotificationAudience,
    NotificationView,
)


class UserAudience(BaseModel):
    mode: Literal["user"]
    usernames: list[str] = Field(default_factory=list)


class RoleAudience(BaseModel):
    mode: Literal["role"]
    roles: list[str] = Field(default_factory=list)


class BroadcastAudience(BaseModel):
    mode: Literal["broadcast"]


AudienceIn = Annotated[UserAudience | RoleAudience | BroadcastAudience, Field(discriminator="mode")]


def audience_to_domain(audience: UserAudience | RoleAudience | BroadcastAudience) -> NotificationAudience:
    match audience:
        case UserAudience():
            return NotificationAudience(mode=AudienceMode.USER, usernames=audience.usernames)
        case RoleAudience():
            return NotificationAudience(mode=AudienceMode.ROLE, roles=audience.roles)
        case _:
            return NotificationAudience(mode=AudienceMode.BROADCAST)


class TargetIn(BaseModel):
    kind: NotificationCategory | None = None
    ref_id: str | None = None


class NotificationCreateRequest(BaseModel):
    """Author payload. Unknown channel names are dropped, not rejected."""

    title: str
    body: str = Field(min_length=1)
    audience: AudienceIn
    severity: NotificationSeverity = NotificationSeverity.INFO
    type: NotificationType | None = None
    channels: list[str] = Field(default_factory=list)
    target: TargetIn | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    icon: str | None = None
    link: str | None = None
    source: str | None = None


class NotificationUpdateRequest(BaseModel):
    title: str | None = None
    type: NotificationType | None = None
    body: str | None = None
    severity: NotificationSeverity | None = None
    target_kind: NotificationCategory | None = None


class AudienceOut(BaseModel):
    mode: AudienceMode
    usernames: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)


class TargetOut(BaseModel):
    kind: NotificationCategory | None = None
    ref_id: str | None = None


class NotificationMasterResponse(BaseModel):
    notification_id: str
    title: str
    category: NotificationCategory
    type: NotificationType
    severity: NotificationSeverity
    body: str
    audience: AudienceOut
    channels: list[NotificationChannel]
    target: TargetOut
    created_at: str
    expires_at: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    icon: str | None = None
    link: str | None = None
    source: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, master: DomainNotificationMaster) -> "NotificationMasterResponse":
        return cls(
            notification_id=master.notification_id,
            title=master.title,
            category=master.category,
            type=master.type,
            severity=master.severity,
            body=master.body,
            audience=AudienceOut(
                mode=master.audience.mode, usernames=master.audience.usernames, roles=master.audience.roles
            ),
            channels=master.channels,
            target=TargetOut(kind=master.target.kind, ref_id=master.target.ref_id),
            created_at=format_timestamp(master.created_at),
            expires_at=format_timestamp(master.expires_at) if master.expires_at else None,
            metadata=master.metadata,
            tags=master.tags,
            icon=master.icon,
            link=master.link,
            source=master.source,
        )


class NotificationResponse(NotificationMasterResponse):
    """A master merged with the caller's state."""

    is_read: bool
    is_archived: bool
    delivered_at: str | None = None
    read_at: str | None = None

    @classmethod
    def from_view(cls, view: NotificationView) -> "NotificationResponse":
        base = NotificationMasterResponse.from_domain(view.master).model_dump()
        state = view.state
        return cls(
            **base,
            is_read=state.is_read,
            is_archived=state.is_archived,
            delivered_at=format_timestamp(state.delivered_at) if state.delivered_at else None,
            read_at=format_timestamp(state.read_at) if state.read_at else None,
        )


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    count: int


class NotificationCreateResponse(BaseModel):
    notification: NotificationMasterResponse
    matched_users: int
    inserted: int
    batches_failed: int

    @classmethod
    def from_domain(cls, master: DomainNotificationMaster, result: FanOutResult) -> "NotificationCreateResponse":
        return cls(
            notification=NotificationMasterResponse.from_domain(master),
            matched_users=result.matched_users,
            inserted=result.inserted,
            batches_failed=result.batches_failed,
        )


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadResponse(BaseModel):
    notification_id: str
    changed: bool


class BulkUpdateResponse(BaseModel):
    updated: int


class DeleteResponse(BaseModel):
    deleted: int
