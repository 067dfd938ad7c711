# =======================================================================================
# ctrlbx_admin/services/dashboard_service.py
# =======================================================================================
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models.enums import EVENT_TYPES, event_type_name
from ..models.schemas import ChartPoint, DashboardStats
from .base import ViewService, items, sorted_by
from .filter_state import DateRange, FilterStateController
from .view_lifecycle import CancellationToken

CHART_PARAMS = {"house": "house_ids", "token": "token_types", "event": "event_types"}

# the chart opens on granted accesses only
DEFAULT_EVENTS = ["ACCESS_GRANTED"]


def month_to_date(today: Optional[date] = None) -> DateRange:
    today = today or date.today()
    return DateRange(today.replace(day=1), today)


class DashboardService(ViewService):
    """Stat cards and the token usage chart."""

    view = "dashboard"

    # ---------- filter state ----------

    def chart_filter(
        self,
        houses: Sequence[str],
        token_types: Sequence[str],
        selection: Optional[Dict[str, Sequence[str]]] = None,
        date_range: Optional[DateRange] = None,
    ) -> FilterStateController:
        selection = selection or {}
        controller = FilterStateController(
            fields={"house": "house_id", "token": "token_type", "event": "event_type"},
            params=CHART_PARAMS,
            date_range=date_range or month_to_date(),
        )
        controller.build_multi_select("house", houses, "Todas", selection=selection.get("house"))
        controller.build_multi_select("token", token_types, "Todos", selection=selection.get("token"))
        controller.build_multi_select(
            "event", EVENT_TYPES, "Evento", event_type_name,
            selection=selection.get("event", DEFAULT_EVENTS),
        )
        return controller

    # ---------- summary ----------

    async def get_stats(self, token: Optional[CancellationToken] = None) -> DashboardStats:
        self.session.require("dashboard.view")
        (response,) = await self._load_all(self._token(token), self.gateway.get_dashboard_stats())
        if response is None or not response.success:
            return DashboardStats()
        return response.stats

    async def get_chart(
        self, controller: FilterStateController, token: Optional[CancellationToken] = None
    ) -> List[ChartPoint]:
        """The date range and every restricted dimension go to the backend."""
        self.session.require("dashboard.view")
        (response,) = await self._load_all(
            self._token(token), self.gateway.get_chart_data(controller.query_params())
        )
        return items(response, "chart_data")

    async def chart_for(
        self,
        selection: Dict[str, Sequence[str]],
        date_range: Optional[DateRange] = None,
        token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Re-query the chart for a committed selection; stats are not refetched."""
        self.session.require("dashboard.view")
        token = self._token(token)

        houses_res, tokens_res = await self._load_all(
            token, self.gateway.get_houses(), self.gateway.get_token_types()
        )
        houses, token_types = option_ids(houses_res, tokens_res)

        controller = self.chart_filter(houses, token_types, selection, date_range)
        chart = await self.get_chart(controller, token)
        return {"filters": controller.describe(), "chart": chart_matrix(chart)}

    async def load(
        self,
        selection: Optional[Dict[str, Sequence[str]]] = None,
        date_range: Optional[DateRange] = None,
        token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        self.session.require("dashboard.view")
        token = self._token(token)

        stats, houses_res, tokens_res = await self._load_all(
            token,
            self.gateway.get_dashboard_stats(),
            self.gateway.get_houses(),
            self.gateway.get_token_types(),
        )
        houses, token_types = option_ids(houses_res, tokens_res)

        controller = self.chart_filter(houses, token_types, selection, date_range)
        chart = await self.get_chart(controller, token)

        return {
            "stats": stats.stats if stats is not None and stats.success else DashboardStats(),
            "filters": controller.describe(),
            "chart": chart_matrix(chart),
        }


def chart_matrix(points: Sequence[ChartPoint]) -> Dict[str, Any]:
    """Pivot chart rows into date x token type counts for a stacked bar chart."""
    dates = sorted({p.date for p in points})
    token_types = sorted({p.token_type for p in points})
    matrix = {d: {t: 0 for t in token_types} for d in dates}
    for p in points:
        matrix[p.date][p.token_type] = p.count
    return {"dates": dates, "tokenTypes": token_types, "matrix": matrix}


def option_ids(houses_res, tokens_res) -> Tuple[List[str], List[str]]:
    """Sorted house ids and token types offered by the chart filters."""
    houses = [h.house_id for h in sorted_by(items(houses_res, "houses"), "house_id")]
    token_types = [t.token_type for t in sorted_by(items(tokens_res, "token_types"), "token_type")]
    return houses, token_types
