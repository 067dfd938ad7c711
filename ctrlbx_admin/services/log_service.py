# =======================================================================================
# ctrlbx_admin/services/log_service.py - Access log view
# =======================================================================================
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Set

from ..config import config
from ..models.enums import EVENT_TYPES, event_type_name
from ..models.schemas import LogEntry
from .base import ViewService, items, sorted_by
from .filter_state import DateRange, FilterStateController
from .view_lifecycle import CancellationToken


def last_days(days: int, today: Optional[date] = None) -> DateRange:
    today = today or date.today()
    return DateRange(today - timedelta(days=days), today)


class LogService(ViewService):
    """
    Access log table with four multi-select filters (house, device, token
    type, event). The date range is a backend query parameter; the
    multi-selects narrow the fetched rows client-side when the operator
    presses search.
    """

    view = "logs"

    def logs_filter(
        self,
        houses: Sequence[str],
        devices: Sequence[str],
        token_types: Sequence[str],
        selection: Optional[Dict[str, Sequence[str]]] = None,
        date_range: Optional[DateRange] = None,
    ) -> FilterStateController:
        selection = selection or {}
        controller = FilterStateController(
            fields={"house": "house_id", "device": "esp32_id", "token": "token_type", "event": "event_type"},
            date_range=date_range or last_days(config.LOGS_DEFAULT_DAYS),
        )
        controller.build_multi_select("house", houses, "Todas", selection=selection.get("house"))
        controller.build_multi_select("device", devices, "Todos", selection=selection.get("device"))
        controller.build_multi_select("token", token_types, "Todos", selection=selection.get("token"))
        controller.build_multi_select(
            "event", EVENT_TYPES, "Todos", event_type_name, selection=selection.get("event")
        )
        return controller

    async def allowed_houses(self, token: CancellationToken) -> Optional[Set[str]]:
        """None for MASTER; every other role sees only its assigned house ids."""
        if self.session.is_master():
            return None
        (response,) = await self._load_all(token, self.gateway.get_admin_houses(self.session.get_email()))
        return set(items(response, "houses"))

    async def fetch_logs(
        self,
        controller: FilterStateController,
        token: Optional[CancellationToken] = None,
        allowed: Optional[Set[str]] = None,
        limit: Optional[int] = None,
    ) -> List[LogEntry]:
        self.session.require("logs.view")
        params: Dict[str, Any] = dict(controller.date_range.as_params()) if controller.date_range else {}
        if limit:
            params["limit"] = limit
        (response,) = await self._load_all(self._token(token), self.gateway.get_logs(params))
        logs = items(response, "logs")
        if allowed is not None:
            logs = [log for log in logs if log.house_id in allowed]
        return logs

    async def load(
        self,
        selection: Optional[Dict[str, Sequence[str]]] = None,
        date_range: Optional[DateRange] = None,
        token: Optional[CancellationToken] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.session.require("logs.view")
        token = self._token(token)

        devices_res, houses_res, tokens_res = await self._load_all(
            token,
            self.gateway.get_devices(),
            self.gateway.get_houses(),
            self.gateway.get_token_types(),
        )
        allowed = await self.allowed_houses(token)

        houses = [h.house_id for h in sorted_by(items(houses_res, "houses"), "house_id")]
        if allowed is not None:
            houses = [h for h in houses if h in allowed]
        devices = [d.esp32_id for d in sorted_by(items(devices_res, "devices"), "esp32_id")]
        token_types = [t.token_type for t in sorted_by(items(tokens_res, "token_types"), "token_type")]

        controller = self.logs_filter(houses, devices, token_types, selection, date_range)
        logs = await self.fetch_logs(controller, token, allowed, limit)

        return {
            "filters": controller.describe(),
            "logs": controller.apply(logs),
            "canExport": self.session.can("logs.export"),
        }
