# =======================================================================================
# ctrlbx_admin/api/routes/tokens.py - Token Type Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Query

from ...models.schemas import ActionResponse, TokenTypeRequest
from ...services.token_service import TokenTypeService
from ...services.view_lifecycle import CancellationToken
from ..dependencies import enter_view, view_service

router = APIRouter()


@router.get("/tokens")
async def list_token_types(
    token: CancellationToken = Depends(enter_view("tokens")),
    service: TokenTypeService = Depends(view_service(TokenTypeService)),
):
    return await service.load(token)


@router.post("/tokens", response_model=ActionResponse)
async def create_token_type(
    request: TokenTypeRequest, service: TokenTypeService = Depends(view_service(TokenTypeService))
):
    result = await service.create_token_type(request.token_type, request.token_name, request.description)
    return ActionResponse(message=result.message or "Token type created")


@router.put("/tokens/{token_type}", response_model=ActionResponse)
async def update_token_type(
    token_type: str,
    request: TokenTypeRequest,
    service: TokenTypeService = Depends(view_service(TokenTypeService)),
):
    result = await service.update_token_type(token_type, request.model_dump(exclude_none=True))
    return ActionResponse(message=result.message or "Token type updated")


@router.delete("/tokens/{token_type}", response_model=ActionResponse)
async def delete_token_type(
    token_type: str,
    force: bool = Query(False, description="Discard user balances of this type"),
    service: TokenTypeService = Depends(view_service(TokenTypeService)),
):
    result = await service.delete_token_type(token_type, force=force)
    return ActionResponse(message=result.message or "Token type deleted")


@router.post("/tokens/{token_type}/reset-balance", response_model=ActionResponse)
async def reset_balance(token_type: str, service: TokenTypeService = Depends(view_service(TokenTypeService))):
    result = await service.reset_balance(token_type)
    return ActionResponse(message=result.message or "Balances reset")
