# =======================================================================================
# ctrlbx_admin/api/routes/roles.py - Admin Account Endpoints
# =======================================================================================
from typing import Optional

from fastapi import APIRouter, Depends

from ...models.schemas import ActionResponse, AdminRequest
from ...services.filter_state import DateRange
from ...services.role_service import RoleService
from ...services.view_lifecycle import CancellationToken
from ...utils.exceptions import InputValidationError
from ..dependencies import date_range, enter_view, view_service

router = APIRouter()


@router.get("/roles")
async def list_admins(
    token: CancellationToken = Depends(enter_view("roles")),
    service: RoleService = Depends(view_service(RoleService)),
):
    return await service.load(token)


# declared before /roles/{email} so it is not taken for an address
@router.get("/roles/admin-log")
async def admin_log(
    dates: Optional[DateRange] = Depends(date_range),
    service: RoleService = Depends(view_service(RoleService)),
):
    entries = await service.admin_log(dates.as_params() if dates else None)
    return {"entries": entries}


@router.post("/roles", response_model=ActionResponse)
async def create_admin(request: AdminRequest, service: RoleService = Depends(view_service(RoleService))):
    result = await service.create_admin(request.email, request.role)
    return ActionResponse(message=result.message or "Administrator created")


@router.put("/roles/{email}", response_model=ActionResponse)
async def update_admin(email: str, request: AdminRequest, service: RoleService = Depends(view_service(RoleService))):
    # one change per request, each a single updateAdmin call
    if (request.role is None) == (request.status is None):
        raise InputValidationError("Send either a role or a status change")
    if request.role is not None:
        result = await service.update_role(email, request.role)
    else:
        result = await service.set_status(email, request.status)
    return ActionResponse(message=result.message or "Administrator updated")
