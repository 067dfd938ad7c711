# =======================================================================================
# ctrlbx_admin/services/token_service.py - Token type inventory
# =======================================================================================
import logging
from typing import Any, Dict, Optional

from ..models.enums import Status
from ..models.schemas import GatewayResponse
from ..utils.exceptions import InputValidationError
from ..utils.validators import require_fields
from .base import ViewService, items, sorted_by
from .view_lifecycle import CancellationToken

logger = logging.getLogger(__name__)


class TokenTypeService(ViewService):
    """
    Token types (the credit currencies a device consumes).

    Deleting a type that users still hold a balance of is rejected by the
    backend with the users_have_balance sentinel, surfaced as
    ForceDeleteRequired. The caller confirms and repeats with force=True.
    """

    view = "tokens"

    async def load(self, token: Optional[CancellationToken] = None) -> Dict[str, Any]:
        self.session.require("tokens.view")
        (response,) = await self._load_all(self._token(token), self.gateway.get_token_types())
        token_types = sorted_by(items(response, "token_types"), "token_type")
        return {
            "tokenTypes": [t.model_dump() for t in token_types],
            "canCreate": self.session.can("tokens.create"),
            "canEdit": self.session.can("tokens.edit"),
            "canDelete": self.session.can("tokens.delete"),
        }

    async def create_token_type(self, token_type: str, token_name: str,
                                description: Optional[str] = None) -> GatewayResponse:
        self.session.require("tokens.create")
        data = {
            "token_type": (token_type or "").strip().upper(),
            "token_name": (token_name or "").strip(),
        }
        require_fields(data, ["token_type", "token_name"])
        data["description"] = (description or "").strip()
        data["status"] = Status.ACTIVE.value
        return await self._mutate("tokens.create", lambda: self.gateway.create_token_type(data))

    async def update_token_type(self, token_type: str, data: Dict[str, Any]) -> GatewayResponse:
        self.session.require("tokens.edit")
        payload = {k: v.strip() if isinstance(v, str) else v
                   for k, v in data.items() if v is not None and k != "token_type"}
        if "status" in payload and payload["status"] not in (Status.ACTIVE.value, Status.INACTIVE.value):
            raise InputValidationError("Status must be ACTIVO or INACTIVO")
        if not payload:
            raise InputValidationError("Nothing to update")
        return await self._mutate(
            "tokens.edit", lambda: self.gateway.update_token_type(token_type, payload)
        )

    async def toggle_status(self, token_type: str, current_status: str) -> GatewayResponse:
        new_status = Status.INACTIVE.value if current_status == Status.ACTIVE.value else Status.ACTIVE.value
        return await self.update_token_type(token_type, {"status": new_status})

    async def delete_token_type(self, token_type: str, force: bool = False) -> GatewayResponse:
        self.session.require("tokens.delete")
        if force:
            logger.warning("Force deleting token type %s (user balances are discarded)", token_type)
        return await self._mutate(
            "tokens.delete", lambda: self.gateway.delete_token_type(token_type, force=force)
        )

    async def reset_balance(self, token_type: str) -> GatewayResponse:
        """Zero every user's balance of this type. Single POST, never retried."""
        self.session.require("tokens.edit")
        return await self._mutate(
            "tokens.edit", lambda: self.gateway.reset_balance_by_token_type(token_type)
        )
