# =======================================================================================
# ctrlbx_admin/api/routes/dashboard.py - Stats and token usage chart
# =======================================================================================
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...services.dashboard_service import DashboardService
from ...services.filter_state import DateRange
from ...services.view_lifecycle import CancellationToken
from ..dependencies import date_range, enter_view, selection, view_service

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(
    house: Optional[List[str]] = Query(None),
    token_type: Optional[List[str]] = Query(None),
    event: Optional[List[str]] = Query(None),
    dates: Optional[DateRange] = Depends(date_range),
    token: CancellationToken = Depends(enter_view("dashboard")),
    service: DashboardService = Depends(view_service(DashboardService)),
):
    chosen = selection(house=house, token=token_type, event=event)
    return await service.load(chosen, dates, token)


@router.get("/dashboard/chart")
async def get_chart(
    house: Optional[List[str]] = Query(None),
    token_type: Optional[List[str]] = Query(None),
    event: Optional[List[str]] = Query(None),
    dates: Optional[DateRange] = Depends(date_range),
    token: CancellationToken = Depends(enter_view("dashboard")),
    service: DashboardService = Depends(view_service(DashboardService)),
):
    chosen = selection(house=house, token=token_type, event=event)
    return await service.chart_for(chosen, dates, token)
