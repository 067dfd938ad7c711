# =======================================================================================
# ctrlbx_admin/services/role_service.py - Admin accounts and roles
# =======================================================================================
import logging
from typing import Any, Dict, List, Optional

from ..config import config
from ..models.enums import Roles, Status
from ..models.schemas import AdminRecord, GatewayResponse
from ..utils.exceptions import InputValidationError
from ..utils.validators import validate_email
from .base import ViewService, items
from .view_lifecycle import CancellationToken

logger = logging.getLogger(__name__)

# shown when the backend is unreachable in debug mode only
SAMPLE_ADMINS = (
    {"admin_email": "master@example.com", "role": "MASTER", "status": "ACTIVO"},
    {"admin_email": "admin@example.com", "role": "ADMIN", "status": "ACTIVO"},
    {"admin_email": "viewer@example.com", "role": "VIEWER", "status": "INACTIVO"},
)

_ROLES = tuple(r.value for r in Roles)


def _check_role(role: Optional[str]) -> str:
    if role not in _ROLES:
        raise InputValidationError(f"Role must be one of {', '.join(_ROLES)}")
    return role


class RoleService(ViewService):
    view = "roles"

    async def load(self, token: Optional[CancellationToken] = None) -> Dict[str, Any]:
        self.session.require("roles.view")
        (response,) = await self._load_all(self._token(token), self.gateway.get_admins())
        admins: List[AdminRecord] = items(response, "admins")
        if response is None and config.API_DEBUG:
            logger.warning("Backend unreachable, showing sample admins")
            admins = [AdminRecord.model_validate(a) for a in SAMPLE_ADMINS]

        return {
            "admins": [a.model_dump() for a in admins],
            "canCreate": self.session.can("roles.create"),
            "canEdit": self.session.can("roles.edit"),
        }

    async def create_admin(self, email: str, role: str) -> GatewayResponse:
        self.session.require("roles.create")
        data = {
            "admin_email": validate_email(email),
            "role": _check_role(role),
            "status": Status.ACTIVE.value,
        }
        return await self._mutate("roles.create", lambda: self.gateway.create_admin(data))

    async def update_role(self, email: str, role: str) -> GatewayResponse:
        self.session.require("roles.edit")
        data = {"role": _check_role(role)}
        return await self._mutate("roles.edit", lambda: self.gateway.update_admin(email, data))

    async def set_status(self, email: str, status: str) -> GatewayResponse:
        self.session.require("roles.edit")
        if status not in (Status.ACTIVE.value, Status.INACTIVE.value):
            raise InputValidationError("Status must be ACTIVO or INACTIVO")
        if email == self.session.get_email() and status == Status.INACTIVE.value:
            raise InputValidationError("You cannot deactivate your own account")
        return await self._mutate(
            "roles.edit", lambda: self.gateway.update_admin(email, {"status": status})
        )

    async def toggle_status(self, email: str, current_status: str) -> GatewayResponse:
        new_status = Status.INACTIVE.value if current_status == Status.ACTIVE.value else Status.ACTIVE.value
        return await self.set_status(email, new_status)

    async def admin_log(self, filters: Optional[Dict[str, Any]] = None,
                        token: Optional[CancellationToken] = None) -> List[Dict[str, Any]]:
        self.session.require("roles.viewAdminLog")
        (response,) = await self._load_all(self._token(token), self.gateway.get_admin_log(filters))
        return items(response, "entries")
