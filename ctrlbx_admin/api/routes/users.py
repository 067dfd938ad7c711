# =======================================================================================
# ctrlbx_admin/api/routes/users.py - User Management Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Query

from ...models.schemas import (
    ActionResponse,
    AssignHousesRequest,
    CreateUserRequest,
    TokenBalanceRequest,
    UpdateUserRequest,
)
from ...services.filter_state import UserFilter
from ...services.user_service import UserService
from ...services.view_lifecycle import CancellationToken
from ...utils.exceptions import InputValidationError
from ..dependencies import enter_view, view_service

router = APIRouter()


# ---- list with search / status / name sort ----

@router.get("/users")
async def list_users(
    search: str = Query("", description="Name or UID substring"),
    status: str = Query("", pattern="^(|ACTIVO|INACTIVO)$"),
    sort: str = Query("", pattern="^(|asc|desc)$"),
    token: CancellationToken = Depends(enter_view("users")),
    service: UserService = Depends(view_service(UserService)),
):
    filters = UserFilter(search_term=search.strip(), status=status, sort_name=sort)
    return await service.load(filters, token)


@router.post("/users", response_model=ActionResponse)
async def create_user(request: CreateUserRequest, service: UserService = Depends(view_service(UserService))):
    result = await service.create_user(request.uid, request.user_name, request.user_type)
    return ActionResponse(message=result.message or "User created")


@router.put("/users/{uid}", response_model=ActionResponse)
async def update_user(
    uid: str, request: UpdateUserRequest, service: UserService = Depends(view_service(UserService))
):
    # status toggles and field edits are separate updateUser calls
    if request.status is not None:
        if request.user_name is not None or request.user_type is not None:
            raise InputValidationError("Change the status separately from name or type")
        result = await service.set_status(uid, request.status)
    else:
        result = await service.update_user(uid, request.user_name, request.user_type)
    return ActionResponse(message=result.message or "User updated")


# ---- token balance ----

@router.post("/users/{uid}/tokens", response_model=ActionResponse)
async def adjust_tokens(
    uid: str, request: TokenBalanceRequest, service: UserService = Depends(view_service(UserService))
):
    result = await service.adjust_tokens(uid, request.token_type, request.delta)
    return ActionResponse(message=result.message or "Balance updated")


@router.put("/users/{uid}/houses", response_model=ActionResponse)
async def assign_houses(
    uid: str, request: AssignHousesRequest, service: UserService = Depends(view_service(UserService))
):
    result = await service.assign_houses(uid, request.house_ids)
    return ActionResponse(message=result.message or "Houses assigned")
