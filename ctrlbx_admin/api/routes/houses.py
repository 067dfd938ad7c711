# =======================================================================================
# ctrlbx_admin/api/routes/houses.py - House Endpoints
# =======================================================================================
from typing import List

from fastapi import APIRouter, Body, Depends

from ...models.schemas import ActionResponse, HouseRequest
from ...services.house_service import HouseService
from ...services.view_lifecycle import CancellationToken
from ..dependencies import enter_view, view_service

router = APIRouter()


@router.get("/houses")
async def list_houses(
    token: CancellationToken = Depends(enter_view("houses")),
    service: HouseService = Depends(view_service(HouseService)),
):
    return await service.load(token)


@router.post("/houses", response_model=ActionResponse)
async def create_house(request: HouseRequest, service: HouseService = Depends(view_service(HouseService))):
    result = await service.create_house(request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "House created")


@router.put("/houses/{house_id}", response_model=ActionResponse)
async def update_house(
    house_id: str, request: HouseRequest, service: HouseService = Depends(view_service(HouseService))
):
    result = await service.update_house(house_id, request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "House updated")


@router.delete("/houses/{house_id}", response_model=ActionResponse)
async def delete_house(house_id: str, service: HouseService = Depends(view_service(HouseService))):
    result = await service.delete_house(house_id)
    return ActionResponse(message=result.message or "House deleted")


@router.put("/houses/{house_id}/admins", response_model=ActionResponse)
async def assign_admins(
    house_id: str,
    admin_emails: List[str] = Body(..., embed=True),
    service: HouseService = Depends(view_service(HouseService)),
):
    result = await service.assign_admins(house_id, admin_emails)
    return ActionResponse(message=result.message or "Administrators assigned")
