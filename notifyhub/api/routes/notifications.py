from datetime import datetime

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Depends, Query

from notifyhub.api.dependencies import current_principal
from notifyhub.domain.enums import NotificationChannel, NotificationSeverity, NotificationType
from notifyhub.domain.notification import (
    DomainNotificationCreate,
    DomainNotificationUpdate,
    NotificationListFilters,
    NotificationTarget,
    Pagination,
)
from notifyhub.domain.notification.catalog import normalize_category
from notifyhub.domain.recycle import InvalidCategoryError
from notifyhub.domain.user import Principal
from notifyhub.schemas_pydantic.notification import (
    BulkUpdateResponse,
    DeleteResponse,
    MarkReadResponse,
    NotificationCreateRequest,
    NotificationCreateResponse,
    NotificationListResponse,
    NotificationMasterResponse,
    NotificationResponse,
    NotificationUpdateRequest,
    UnreadCountResponse,
    audience_to_domain,
)
from notifyhub.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"], route_class=DishkaRoute)


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
    category: str | None = Query(None),
    titles: list[str] | None = Query(None),
    type: NotificationType | None = Query(None),
    severity: NotificationSeverity | None = Query(None),
    channel: NotificationChannel | None = Query(None),
    search: str | None = Query(None, description="Case-insensitive match on title, body and tags"),
    created_after: datetime | None = Query(None),
    created_before: datetime | None = Query(None),
    only_unread: bool = Query(False),
    limit: int | None = Query(None, le=200),
    page: int | None = Query(None, ge=0),
    skip: int | None = Query(None, ge=0, description="Legacy offset, ignored when page is given"),
) -> NotificationListResponse:
    normalized = None
    if category:
        normalized = normalize_category(category)
        if normalized is None:
            raise InvalidCategoryError(category)

    filters = NotificationListFilters(
        category=normalized,
        titles=titles,
        type=type,
        severity=severity,
        channel=channel,
        search=search,
        created_after=created_after,
        created_before=created_before,
        only_unread=only_unread,
    )
    views = await notification_service.list_notifications(
        principal, filters, Pagination(limit=limit, page=page, skip=skip)
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.from_view(v) for v in views],
        count=len(views),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await notification_service.unread_count(principal))


@router.post("", response_model=NotificationCreateResponse, status_code=201)
async def create_notification(
    payload: NotificationCreateRequest,
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> NotificationCreateResponse:
    create = DomainNotificationCreate(
        title=payload.title,
        body=payload.body,
        audience=audience_to_domain(payload.audience),
        severity=payload.severity,
        type=payload.type,
        channels=payload.channels,
        target=NotificationTarget(kind=payload.target.kind, ref_id=payload.target.ref_id) if payload.target else None,
        expires_at=payload.expires_at,
        metadata=payload.metadata,
        tags=payload.tags,
        icon=payload.icon,
        link=payload.link,
        source=payload.source,
    )
    master, result = await notification_service.create_notification(principal, create)
    return NotificationCreateResponse.from_domain(master, result)


@router.patch("/{notification_id}", response_model=NotificationMasterResponse)
async def update_notification(
    notification_id: str,
    payload: NotificationUpdateRequest,
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> NotificationMasterResponse:
    update = DomainNotificationUpdate(**payload.model_dump())
    master = await notification_service.update_notification(principal, notification_id, update)
    return NotificationMasterResponse.from_domain(master)


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: str,
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> MarkReadResponse:
    changed = await notification_service.mark_read(principal, notification_id)
    return MarkReadResponse(notification_id=notification_id, changed=changed)


@router.post("/mark-all-read", response_model=BulkUpdateResponse)
async def mark_all_read(
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> BulkUpdateResponse:
    return BulkUpdateResponse(updated=await notification_service.mark_all_read(principal))


@router.put("/{notification_id}/archive", response_model=MarkReadResponse)
async def archive_notification(
    notification_id: str,
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> MarkReadResponse:
    changed = await notification_service.archive(principal, notification_id)
    return MarkReadResponse(notification_id=notification_id, changed=changed)


@router.post("/archive-all", response_model=BulkUpdateResponse)
async def archive_all(
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
) -> BulkUpdateResponse:
    return BulkUpdateResponse(updated=await notification_service.archive_all(principal))


@router.delete("", response_model=DeleteResponse)
async def delete_notifications(
    notification_service: FromDishka[NotificationService],
    principal: Principal = Depends(current_principal),
    ids: list[str] | None = Query(None, description="Remove only these; omit to clear the caller's inbox"),
) -> DeleteResponse:
    """Removes the caller's state rows; shared masters are untouched."""
    if ids is None:
        deleted = await notification_service.remove_all_for_user(principal)
    else:
        deleted = await notification_service.remove_for_user(principal, ids)
    return DeleteResponse(deleted=deleted)
