# =======================================================================================
# ctrlbx_admin/services/masterkey_service.py - Master key management
# =======================================================================================
from typing import Any, Dict, List, Optional

from ..models.enums import Status
from ..models.schemas import Device, GatewayResponse, House, MasterKey
from ..utils.exceptions import InputValidationError
from ..utils.validators import require_fields
from .base import ViewService, items
from .view_lifecycle import CancellationToken

LEVELS = ("GLOBAL", "HOUSE", "DEVICE")


def target_label(key: MasterKey, houses: List[House], devices: List[Device]) -> str:
    if key.masterkey_level == "GLOBAL" or not key.level_target:
        return "-"
    if key.masterkey_level == "HOUSE":
        house = next((h for h in houses if h.house_id == key.level_target), None)
        return f"{key.level_target} ({house.house_street or ''})" if house else key.level_target
    device = next((d for d in devices if d.esp32_id == key.level_target), None)
    return f"{key.level_target} ({device.location or ''})" if device else key.level_target


class MasterKeyService(ViewService):
    view = "masterkeys"

    async def load(self, token: Optional[CancellationToken] = None) -> Dict[str, Any]:
        self.session.require("masterkeys.view")
        keys_res, houses_res, devices_res = await self._load_all(
            self._token(token),
            self.gateway.get_masterkeys(),
            self.gateway.get_houses(),
            self.gateway.get_devices(),
        )
        houses = items(houses_res, "houses")
        devices = items(devices_res, "devices")

        rows = []
        for key in items(keys_res, "masterkeys"):
            row = key.model_dump()
            row["target_label"] = target_label(key, houses, devices)
            rows.append(row)

        return {
            "masterkeys": rows,
            "houses": [h.house_id for h in houses],
            "devices": [d.esp32_id for d in devices],
            "canCreate": self.session.can("masterkeys.create"),
            "canEdit": self.session.can("masterkeys.edit"),
            "canDelete": self.session.can("masterkeys.delete"),
        }

    async def create_masterkey(self, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("masterkeys.create")
        payload = self._validated(data)
        require_fields(payload, ["masterkey_id"])
        payload.setdefault("state", Status.ACTIVE.value)
        return await self._mutate("masterkeys.create", lambda: self.gateway.create_masterkey(payload))

    async def update_masterkey(self, masterkey_id: str, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("masterkeys.edit")
        payload = self._validated(data)
        payload.pop("masterkey_id", None)
        if not payload:
            raise InputValidationError("Nothing to update")
        return await self._mutate(
            "masterkeys.edit", lambda: self.gateway.update_masterkey(masterkey_id, payload)
        )

    async def toggle_state(self, masterkey_id: str, current_state: str) -> GatewayResponse:
        new_state = Status.INACTIVE.value if current_state == Status.ACTIVE.value else Status.ACTIVE.value
        return await self.update_masterkey(masterkey_id, {"state": new_state})

    async def delete_masterkey(self, masterkey_id: str) -> GatewayResponse:
        self.session.require("masterkeys.delete")
        return await self._mutate(
            "masterkeys.delete", lambda: self.gateway.delete_masterkey(masterkey_id)
        )

    @staticmethod
    def _validated(data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: v.strip() if isinstance(v, str) else v
                   for k, v in data.items() if v is not None}
        level = payload.get("masterkey_level")
        if level is not None:
            if level not in LEVELS:
                raise InputValidationError(f"Level must be one of {', '.join(LEVELS)}")
            if level == "GLOBAL":
                payload["level_target"] = ""
            elif not payload.get("level_target"):
                raise InputValidationError("A target is required for the chosen level")
        state = payload.get("state")
        if state is not None and state not in (Status.ACTIVE.value, Status.INACTIVE.value):
            raise InputValidationError("State must be ACTIVO or INACTIVO")
        return payload
