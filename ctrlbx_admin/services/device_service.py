# =======================================================================================
# ctrlbx_admin/services/device_service.py - ESP32 device management
# =======================================================================================
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..models.enums import Roles
from ..models.schemas import Device, GatewayResponse, MasterKey
from ..utils.exceptions import InputValidationError
from ..utils.validators import (
    is_device_online,
    require_fields,
    to_optional_int,
    validate_time_window,
)
from .base import ViewService, items, sorted_by
from .filter_state import DeviceFilter
from .view_lifecycle import CancellationToken

MAX_TIME_LIMIT_MIN = 240


class DeviceService(ViewService):
    """Device table with instant dropdown filters plus create/edit."""

    view = "devices"

    async def load(
        self,
        filters: Optional[DeviceFilter] = None,
        token: Optional[CancellationToken] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        self.session.require("devices.view")
        token = self._token(token)
        filters = filters or DeviceFilter()

        tokens_res, houses_res = await self._load_all(
            token, self.gateway.get_token_types(), self.gateway.get_houses()
        )
        devices = await self.fetch_devices(token)

        rows = []
        for device in filters.apply(devices, now):
            row = device.model_dump()
            row["online"] = is_device_online(device.last_seen, now)
            rows.append(row)

        return {
            "devices": rows,
            "houseOptions": [h.house_id for h in sorted_by(items(houses_res, "houses"), "house_id")],
            "tokenTypeOptions": [
                t.token_type for t in sorted_by(items(tokens_res, "token_types"), "token_type")
            ],
            "filters": {
                "house_id": filters.house_id,
                "token_type": filters.token_type,
                "status": filters.status,
                "connection": filters.connection,
            },
            "canCreate": self.session.can("devices.create"),
            "canEdit": self.session.can("devices.edit"),
            "canToggle": self.session.can("devices.toggleStatus"),
        }

    async def fetch_devices(self, token: Optional[CancellationToken] = None) -> List[Device]:
        # ADMIN (not MASTER) only sees devices of their houses
        admin_email = None
        if self.session.has_role(Roles.ADMIN) and not self.session.is_master():
            admin_email = self.session.get_email()
        (response,) = await self._load_all(self._token(token), self.gateway.get_devices(admin_email))
        return items(response, "devices")

    async def masterkeys_for(self, esp32_id: str, token: Optional[CancellationToken] = None) -> List[MasterKey]:
        self.session.require("devices.viewHistory")
        (response,) = await self._load_all(
            self._token(token), self.gateway.get_masterkeys_for_device(esp32_id)
        )
        return items(response, "masterkeys")

    # ---------- mutations ----------

    async def create_device(self, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("devices.create")
        require_fields(data, ["esp32_id", "location"])
        self._check_schedule(data)
        payload = self._clean(data)
        return await self._mutate("devices.create", lambda: self.gateway.create_device(payload))

    async def update_device(self, esp32_id: str, data: Dict[str, Any]) -> GatewayResponse:
        payload = self._clean(data)
        payload.pop("esp32_id", None)
        # an update that only flips `active` is the status toggle
        action = "devices.toggleStatus" if set(payload) == {"active"} else "devices.edit"
        self.session.require(action)
        self._check_schedule(payload)
        return await self._mutate(action, lambda: self.gateway.update_device(esp32_id, payload))

    async def toggle_status(self, esp32_id: str, active: bool) -> GatewayResponse:
        return await self.update_device(esp32_id, {"active": not active})

    @staticmethod
    def _check_schedule(data: Dict[str, Any]) -> None:
        start, end = data.get("time_window_start"), data.get("time_window_end")
        if start or end:
            validate_time_window(start or "", end or "")
        limit = data.get("time_limit_min")
        if limit is not None and not 1 <= (to_optional_int(limit) or 0) <= MAX_TIME_LIMIT_MIN:
            raise InputValidationError(f"Time limit must be between 1 and {MAX_TIME_LIMIT_MIN} minutes")

    @staticmethod
    def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
        out = {}
        for key, value in data.items():
            if value is None:
                continue
            out[key] = value.strip() if isinstance(value, str) else value
        return out
