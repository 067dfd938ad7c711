# =======================================================================================
# ctrlbx_admin/services/house_service.py - Houses and house administrators
# =======================================================================================
import re
from typing import Any, Dict, List, Optional

from ..models.enums import Roles
from ..models.schemas import Device, GatewayResponse
from ..utils.exceptions import InputValidationError
from ..utils.validators import validate_email, validate_house_id
from .base import ViewService, items, sorted_by
from .gateway import ensure_success
from .view_lifecycle import CancellationToken, gather

_DRIVE_FILE = re.compile(r"/file/d/([a-zA-Z0-9_-]+)")
_DRIVE_ID = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")

HOUSE_FIELDS = (
    "house_img", "house_street", "house_number", "house_extra",
    "house_postcode", "house_lat", "house_long",
)


def drive_image_url(url: Optional[str]) -> str:
    """Google Drive share links become a thumbnail URL; other URLs pass through."""
    if not url:
        return ""
    match = _DRIVE_FILE.search(url) or _DRIVE_ID.search(url)
    if match:
        return f"https://drive.google.com/thumbnail?id={match.group(1)}&sz=w400"
    return url


def device_count(house_id: str, devices: List[Device]) -> int:
    return sum(1 for d in devices if d.house_id == house_id)


class HouseService(ViewService):
    view = "houses"

    async def load(self, token: Optional[CancellationToken] = None) -> Dict[str, Any]:
        self.session.require("houses.view")
        token = self._token(token)

        houses_res, devices_res, admins_res = await self._load_all(
            token,
            self.gateway.get_houses(),
            self.gateway.get_devices(),
            self.gateway.get_all_admin_houses(),
        )
        houses = sorted_by(items(houses_res, "houses"), "house_id")
        devices = items(devices_res, "devices")
        assignments = items(admins_res, "assignments")

        if self.session.has_role(Roles.ADMIN):
            (own,) = await self._load_all(token, self.gateway.get_admin_houses(self.session.get_email()))
            allowed = set(items(own, "houses"))
            houses = [h for h in houses if h.house_id in allowed]

        rows = []
        for house in houses:
            row = house.model_dump()
            row["image_url"] = drive_image_url(house.house_img)
            row["device_count"] = device_count(house.house_id, devices)
            row["admins"] = [a.admin_email for a in assignments if a.house_id == house.house_id]
            rows.append(row)

        return {
            "houses": rows,
            "canCreate": self.session.can("houses.create"),
            "canEdit": self.session.can("houses.edit"),
            "canDelete": self.session.can("houses.delete"),
        }

    # ---------- mutations ----------

    async def create_house(self, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("houses.create")
        payload = self._fields(data)
        payload["house_id"] = validate_house_id(data.get("house_id"))
        return await self._mutate("houses.create", lambda: self.gateway.create_house(payload))

    async def update_house(self, house_id: str, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("houses.edit")
        payload = self._fields(data)
        if not payload:
            raise InputValidationError("Nothing to update")
        return await self._mutate("houses.edit", lambda: self.gateway.update_house(house_id, payload))

    async def delete_house(self, house_id: str, token: Optional[CancellationToken] = None) -> GatewayResponse:
        """
        Refused locally while devices are still assigned to the house.

        The device count is read without the empty-list fallback of page
        loads: if it cannot be read, the GatewayError propagates and nothing
        is deleted.
        """
        self.session.require("houses.delete")
        (devices_res,) = await gather(self._token(token), self.gateway.get_devices())
        ensure_success(devices_res, "houses.delete")
        count = device_count(house_id, devices_res.devices)
        if count > 0:
            raise InputValidationError(
                f"Cannot delete house {house_id}: it has {count} device(s) assigned"
            )
        return await self._mutate("houses.delete", lambda: self.gateway.delete_house(house_id))

    async def assign_admins(self, house_id: str, admin_emails: List[str]) -> GatewayResponse:
        self.session.require("houses.edit")
        emails = list(dict.fromkeys(validate_email(e) for e in admin_emails if e and e.strip()))
        return await self._mutate(
            "houses.edit", lambda: self.gateway.assign_house_admin(house_id, emails)
        )

    @staticmethod
    def _fields(data: Dict[str, Any]) -> Dict[str, Any]:
        out = {}
        for field in HOUSE_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            out[field] = value.strip() if isinstance(value, str) else value
        return out
