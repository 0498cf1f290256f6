from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Depends

from notifyhub.api.dependencies import admin_principal
from notifyhub.schemas_pydantic.sync import (
    FanOutResponse,
    PruneResponse,
    ReconcileResponse,
    RoleChangeRequest,
    SyncStatusResponse,
)
from notifyhub.services.live_sync import LiveSyncService
from notifyhub.services.notifications import ReconciliationCoordinator
from notifyhub.settings import Settings

router = APIRouter(
    prefix="/admin/sync",
    tags=["admin", "sync"],
    route_class=DishkaRoute,
    dependencies=[Depends(admin_principal)],
)


@router.get("/status", response_model=SyncStatusResponse)
async def get_sync_status(live_sync: FromDishka[LiveSyncService]) -> SyncStatusResponse:
    return SyncStatusResponse(**live_sync.status())


@router.post("/prune-orphans", response_model=PruneResponse)
async def prune_orphans(coordinator: FromDishka[ReconciliationCoordinator]) -> PruneResponse:
    return PruneResponse(deleted=await coordinator.prune_orphans())


@router.post("/notifications/{notification_id}/backfill", response_model=FanOutResponse)
async def backfill_notification(
    notification_id: str,
    coordinator: FromDishka[ReconciliationCoordinator],
) -> FanOutResponse:
    return FanOutResponse.from_domain(await coordinator.backfill_for_notification(notification_id))


@router.post("/users/{username}/activate", response_model=ReconcileResponse)
async def activate_user(username: str, coordinator: FromDishka[ReconciliationCoordinator]) -> ReconcileResponse:
    return ReconcileResponse.from_domain(await coordinator.set_user_active(username, True))


@router.post("/users/{username}/deactivate", response_model=ReconcileResponse)
async def deactivate_user(username: str, coordinator: FromDishka[ReconciliationCoordinator]) -> ReconcileResponse:
    return ReconcileResponse.from_domain(await coordinator.set_user_active(username, False))


@router.put("/users/{username}/role", response_model=ReconcileResponse)
async def change_user_role(
    username: str,
    payload: RoleChangeRequest,
    coordinator: FromDishka[ReconciliationCoordinator],
    settings: FromDishka[Settings],
) -> ReconcileResponse:
    remove_stale = settings.SYNC_REMOVE_STALE_ON_ROLE_CHANGE if payload.remove_stale is None else payload.remove_stale
    result = await coordinator.change_user_role(username, payload.role, remove_stale)
    return ReconcileResponse.from_domain(result)
