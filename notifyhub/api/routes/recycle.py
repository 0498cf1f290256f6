from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Depends

from notifyhub.api.dependencies import current_principal
from notifyhub.domain.recycle import PurgeRequest, RestoreRequest
from notifyhub.domain.user import Principal
from notifyhub.schemas_pydantic.recycle import RecycleResponse, RestoreRequestIn
from notifyhub.services.recycle import RecycleBinService

router = APIRouter(prefix="/recyclebin", tags=["recyclebin"], route_class=DishkaRoute)


@router.post("/restore", response_model=RecycleResponse)
async def restore_record(
    payload: RestoreRequestIn,
    recycle_service: FromDishka[RecycleBinService],
    principal: Principal = Depends(current_principal),
) -> RecycleResponse:
    result = await recycle_service.restore(principal, RestoreRequest(**payload.model_dump()))
    return RecycleResponse.from_domain(result)


@router.delete("/{category}/{ref_id}", response_model=RecycleResponse)
async def purge_record(
    category: str,
    ref_id: str,
    recycle_service: FromDishka[RecycleBinService],
    principal: Principal = Depends(current_principal),
) -> RecycleResponse:
    result = await recycle_service.purge(principal, PurgeRequest(category=category, ref_id=ref_id))
    return RecycleResponse.from_domain(result)
