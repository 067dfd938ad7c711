# =======================================================================================
# ctrlbx_admin/api/routes/logs.py - Access Log Endpoint
# =======================================================================================
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...services.filter_state import DateRange
from ...services.log_service import LogService
from ...services.view_lifecycle import CancellationToken
from ..dependencies import date_range, enter_view, selection, view_service

router = APIRouter()


@router.get("/logs")
async def get_logs(
    house: Optional[List[str]] = Query(None),
    device: Optional[List[str]] = Query(None),
    token_type: Optional[List[str]] = Query(None),
    event: Optional[List[str]] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    dates: Optional[DateRange] = Depends(date_range),
    token: CancellationToken = Depends(enter_view("logs")),
    service: LogService = Depends(view_service(LogService)),
):
    chosen = selection(house=house, device=device, token=token_type, event=event)
    result = await service.load(chosen, dates, token, limit)
    result["logs"] = [log.model_dump() for log in result["logs"]]
    return result
