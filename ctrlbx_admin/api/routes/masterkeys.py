# =======================================================================================
# ctrlbx_admin/api/routes/masterkeys.py - Master Key Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends

from ...models.schemas import ActionResponse, MasterKeyRequest
from ...services.masterkey_service import MasterKeyService
from ...services.view_lifecycle import CancellationToken
from ..dependencies import enter_view, view_service

router = APIRouter()


@router.get("/masterkeys")
async def list_masterkeys(
    token: CancellationToken = Depends(enter_view("masterkeys")),
    service: MasterKeyService = Depends(view_service(MasterKeyService)),
):
    return await service.load(token)


@router.post("/masterkeys", response_model=ActionResponse)
async def create_masterkey(
    request: MasterKeyRequest, service: MasterKeyService = Depends(view_service(MasterKeyService))
):
    result = await service.create_masterkey(request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "Masterkey created")


@router.put("/masterkeys/{masterkey_id}", response_model=ActionResponse)
async def update_masterkey(
    masterkey_id: str,
    request: MasterKeyRequest,
    service: MasterKeyService = Depends(view_service(MasterKeyService)),
):
    result = await service.update_masterkey(masterkey_id, request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "Masterkey updated")


@router.delete("/masterkeys/{masterkey_id}", response_model=ActionResponse)
async def delete_masterkey(masterkey_id: str, service: MasterKeyService = Depends(view_service(MasterKeyService))):
    result = await service.delete_masterkey(masterkey_id)
    return ActionResponse(message=result.message or "Masterkey deleted")
