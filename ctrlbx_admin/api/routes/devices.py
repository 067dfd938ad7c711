# =======================================================================================
# ctrlbx_admin/api/routes/devices.py - Device Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Query

from ...models.schemas import ActionResponse, DeviceRequest
from ...services.device_service import DeviceService
from ...services.filter_state import DeviceFilter
from ...services.view_lifecycle import CancellationToken
from ..dependencies import enter_view, view_service

router = APIRouter()


@router.get("/devices")
async def list_devices(
    house_id: str = Query(""),
    token_type: str = Query(""),
    status: str = Query("", pattern="^(|ACTIVO|INACTIVO)$"),
    connection: str = Query("", pattern="^(|ONLINE|OFFLINE)$"),
    token: CancellationToken = Depends(enter_view("devices")),
    service: DeviceService = Depends(view_service(DeviceService)),
):
    filters = DeviceFilter(house_id=house_id, token_type=token_type, status=status, connection=connection)
    return await service.load(filters, token)


@router.post("/devices", response_model=ActionResponse)
async def create_device(request: DeviceRequest, service: DeviceService = Depends(view_service(DeviceService))):
    result = await service.create_device(request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "Device created")


@router.put("/devices/{esp32_id}", response_model=ActionResponse)
async def update_device(
    esp32_id: str, request: DeviceRequest, service: DeviceService = Depends(view_service(DeviceService))
):
    result = await service.update_device(esp32_id, request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "Device updated")


@router.get("/devices/{esp32_id}/masterkeys")
async def device_masterkeys(esp32_id: str, service: DeviceService = Depends(view_service(DeviceService))):
    keys = await service.masterkeys_for(esp32_id)
    return {"masterkeys": [k.model_dump() for k in keys]}
