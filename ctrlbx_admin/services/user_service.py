# =======================================================================================
# ctrlbx_admin/services/user_service.py - User Management Service
# =======================================================================================
from typing import Any, Dict, List, Optional

from ..models.enums import Status
from ..models.schemas import GatewayResponse, TokenType, User, UserHouseAssignment
from ..utils.exceptions import InputValidationError
from ..utils.validators import require_fields, validate_token_delta
from .base import ViewService, items
from .filter_state import UserFilter
from .view_lifecycle import CancellationToken

USER_TYPES = ("GLOBAL", "HOUSE")


class UserService(ViewService):
    """Handles user management operations."""

    view = "users"

    # ----------------- helpers -----------------

    @staticmethod
    def houses_for_user(uid: str, assignments: List[UserHouseAssignment]) -> List[str]:
        return [a.house_id for a in assignments if a.uid == uid]

    @staticmethod
    def active_token_types(token_types: List[TokenType]) -> List[TokenType]:
        """Only active token types can be credited or debited."""
        return [t for t in token_types if t.status == Status.ACTIVE.value]

    # ----------------- view -----------------

    async def load(
        self, filters: Optional[UserFilter] = None, token: Optional[CancellationToken] = None
    ) -> Dict[str, Any]:
        self.session.require("users.view")
        token = self._token(token)
        filters = filters or UserFilter()

        (tokens_res,) = await self._load_all(token, self.gateway.get_token_types())
        users_res, houses_res, assignments_res, devices_res = await self._load_all(
            token,
            self.gateway.get_users(),
            self.gateway.get_houses(),
            self.gateway.get_all_user_houses(),
            self.gateway.get_devices(),
        )

        assignments = items(assignments_res, "assignments")
        rows = []
        for user in filters.apply(items(users_res, "users")):
            row = user.model_dump()
            row["houses"] = self.houses_for_user(user.uid, assignments)
            rows.append(row)

        return {
            "users": rows,
            "tokenTypes": [t.model_dump() for t in self.active_token_types(items(tokens_res, "token_types"))],
            "houses": [h.house_id for h in items(houses_res, "houses")],
            "devices": [d.model_dump() for d in items(devices_res, "devices")],
            "filters": {
                "search": filters.search_term,
                "status": filters.status,
                "sort": filters.sort_name,
            },
            "canCreate": self.session.can("users.create"),
            "canEdit": self.session.can("users.edit"),
            "canToggle": self.session.can("users.toggleStatus"),
            "canAdjust": self.session.can("users.adjustTokens"),
        }

    # ----------------- mutations -----------------

    async def create_user(self, uid: str, user_name: str, user_type: str = "GLOBAL") -> GatewayResponse:
        self.session.require("users.create")
        data = {"uid": (uid or "").strip(), "user_name": (user_name or "").strip()}
        require_fields(data, ["uid", "user_name"])
        if user_type not in USER_TYPES:
            raise InputValidationError(f"User type must be one of {', '.join(USER_TYPES)}")
        data.update(status=Status.ACTIVE.value, user_type=user_type)
        return await self._mutate("users.create", lambda: self.gateway.create_user(data))

    async def update_user(self, uid: str, user_name: Optional[str] = None,
                          user_type: Optional[str] = None) -> GatewayResponse:
        self.session.require("users.edit")
        data: Dict[str, Any] = {}
        if user_name is not None:
            data["user_name"] = user_name.strip()
            require_fields(data, ["user_name"])
        if user_type is not None:
            if user_type not in USER_TYPES:
                raise InputValidationError(f"User type must be one of {', '.join(USER_TYPES)}")
            data["user_type"] = user_type
        if not data:
            raise InputValidationError("Nothing to update")
        return await self._mutate("users.edit", lambda: self.gateway.update_user(uid, data))

    async def set_status(self, uid: str, status: str) -> GatewayResponse:
        self.session.require("users.toggleStatus")
        if status not in (Status.ACTIVE.value, Status.INACTIVE.value):
            raise InputValidationError("Status must be ACTIVO or INACTIVO")
        return await self._mutate(
            "users.toggleStatus", lambda: self.gateway.update_user(uid, {"status": status})
        )

    async def toggle_status(self, uid: str, current_status: str) -> GatewayResponse:
        new_status = Status.INACTIVE.value if current_status == Status.ACTIVE.value else Status.ACTIVE.value
        return await self.set_status(uid, new_status)

    async def adjust_tokens(self, uid: str, token_type: str, delta: Any) -> GatewayResponse:
        self.session.require("users.adjustTokens")
        amount = validate_token_delta(delta)
        require_fields({"token_type": token_type}, ["token_type"])
        return await self._mutate(
            "users.adjustTokens",
            lambda: self.gateway.update_token_balance(uid, token_type, amount),
        )

    async def assign_houses(self, uid: str, house_ids: List[str]) -> GatewayResponse:
        self.session.require("users.edit")
        unique = list(dict.fromkeys(h.strip() for h in house_ids if h and h.strip()))
        return await self._mutate("users.edit", lambda: self.gateway.assign_user_houses(uid, unique))
