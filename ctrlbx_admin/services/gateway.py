# =======================================================================================
# ctrlbx_admin/services/gateway.py - Remote Data Gateway (spreadsheet backend client)
# =======================================================================================
import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from ..config import config
from ..models.enums import StorageKey, USERS_HAVE_BALANCE
from ..models.schemas import (
    AdminHousesResponse,
    AdminLogResponse,
    AdminsResponse,
    AllAdminHousesResponse,
    ChartDataResponse,
    DashboardStatsResponse,
    DevicesResponse,
    GatewayResponse,
    HousesResponse,
    LogsResponse,
    MasterKeysResponse,
    TokenTypesResponse,
    UserHousesResponse,
    UsersResponse,
    UserTokensResponse,
    ValidateAdminResponse,
)
from ..utils.exceptions import (
    ConfigurationError,
    DomainRejectionError,
    ForceDeleteRequired,
    GatewayError,
)
from .storage_service import LocalStorage

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=GatewayResponse)

# Apps Script cannot answer a CORS preflight, so JSON goes out as text/plain.
POST_HEADERS = {"Content-Type": "text/plain;charset=utf-8"}


def ensure_success(response: R, action: str) -> R:
    """Turn a success=false answer into a DomainRejectionError."""
    if response.success:
        return response
    if response.error == USERS_HAVE_BALANCE:
        raise ForceDeleteRequired(response.error, action)
    raise DomainRejectionError(response.error or response.message, action)


class RemoteDataGateway:
    """
    Translates named actions into GET/POST calls against the one backend URL.

    Reads go out as GET with the action in the query string, mutations as a
    POST whose body is the JSON-encoded {action, ...data}. Every answer is
    parsed into its response model here so nothing downstream sees raw sheet
    values.
    """

    def __init__(
        self,
        storage: LocalStorage,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.storage = storage
        self._transport = transport
        self._timeout = timeout if timeout is not None else config.GATEWAY_TIMEOUT

    # ----------------------------------------------------------------------
    # Endpoint configuration
    # ----------------------------------------------------------------------
    @property
    def base_url(self) -> str:
        return self.storage.get_item(StorageKey.BACKEND_URL) or config.BACKEND_URL

    def set_base_url(self, url: str) -> None:
        self.storage.set_item(StorageKey.BACKEND_URL, url.strip())

    def _require_url(self) -> str:
        url = self.base_url
        if not url:
            raise ConfigurationError("Backend URL not configured")
        return url

    # ----------------------------------------------------------------------
    # Transport
    # ----------------------------------------------------------------------
    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def get(self, action: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = self._require_url()
        query = {"action": action}
        query.update({k: v for k, v in (params or {}).items() if v is not None})
        return await self._send("GET", url, action, params=query)

    async def post(self, action: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = self._require_url()
        body = json.dumps({"action": action, **(data or {})})
        return await self._send("POST", url, action, content=body, headers=POST_HEADERS)

    async def _send(self, method: str, url: str, action: str, **kwargs) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            logger.error("API %s error for %s: HTTP %s", method, action, code)
            raise GatewayError(f"HTTP error! status: {code}", status_code=code) from exc
        except httpx.RequestError as exc:
            logger.error("API %s error for %s: %s", method, action, exc)
            raise GatewayError(f"Network error: {exc}") from exc
        except ValueError as exc:
            logger.error("API %s error for %s: invalid JSON", method, action)
            raise GatewayError("Backend returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise GatewayError("Backend returned an unexpected payload")
        if config.API_DEBUG:
            logger.debug("API %s %s -> success=%s", method, action, payload.get("success"))
        return payload

    @staticmethod
    def _parse(model: Type[R], payload: Dict[str, Any], action: str) -> R:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            logger.error("Malformed %s response: %s", action, exc)
            raise GatewayError(f"Malformed response for {action}") from exc

    async def _read(self, model: Type[R], action: str, params: Optional[Dict[str, Any]] = None) -> R:
        return self._parse(model, await self.get(action, params), action)

    async def _write(self, action: str, data: Dict[str, Any]) -> GatewayResponse:
        return self._parse(GatewayResponse, await self.post(action, data), action)

    # ==================== AUTH ====================

    async def validate_admin(self, email: str) -> ValidateAdminResponse:
        return await self._read(ValidateAdminResponse, "validateAdmin", {"email": email})

    # ==================== USERS ====================

    async def get_users(self, filters: Optional[Dict[str, Any]] = None) -> UsersResponse:
        return await self._read(UsersResponse, "getUsers", filters)

    async def get_user_tokens(self, uid: str) -> UserTokensResponse:
        return await self._read(UserTokensResponse, "getUserTokens", {"uid": uid})

    async def create_user(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createUser", data)

    async def update_user(self, uid: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateUser", {"uid": uid, **data})

    async def update_token_balance(self, uid: str, token_type: str, delta: int) -> GatewayResponse:
        return await self._write(
            "updateTokenBalance", {"uid": uid, "token_type": token_type, "delta": int(delta)}
        )

    async def get_all_user_houses(self) -> UserHousesResponse:
        return await self._read(UserHousesResponse, "getAllUserHouses")

    async def assign_user_houses(self, uid: str, house_ids: List[str]) -> GatewayResponse:
        return await self._write("assignUserHouses", {"uid": uid, "house_ids": list(house_ids)})

    # ==================== DEVICES ====================

    async def get_devices(self, admin_email: Optional[str] = None) -> DevicesResponse:
        return await self._read(DevicesResponse, "getDevices", {"admin_email": admin_email})

    async def create_device(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createDevice", data)

    async def update_device(self, esp32_id: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateDevice", {"esp32_id": esp32_id, **data})

    async def get_masterkeys_for_device(self, esp32_id: str) -> MasterKeysResponse:
        return await self._read(MasterKeysResponse, "getMasterkeysForDevice", {"esp32_id": esp32_id})

    # ==================== HOUSES ====================

    async def get_houses(self) -> HousesResponse:
        return await self._read(HousesResponse, "getHouses")

    async def get_admin_houses(self, email: str) -> AdminHousesResponse:
        return await self._read(AdminHousesResponse, "getAdminHouses", {"email": email})

    async def get_all_admin_houses(self) -> AllAdminHousesResponse:
        return await self._read(AllAdminHousesResponse, "getAllAdminHouses")

    async def create_house(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createHouse", data)

    async def update_house(self, house_id: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateHouse", {"house_id": house_id, **data})

    async def delete_house(self, house_id: str) -> GatewayResponse:
        return await self._write("deleteHouse", {"house_id": house_id})

    async def assign_house_admin(self, house_id: str, admin_emails: List[str]) -> GatewayResponse:
        return await self._write(
            "assignHouseAdmin", {"house_id": house_id, "admin_emails": list(admin_emails)}
        )

    # ==================== LOGS ====================

    async def get_logs(self, filters: Optional[Dict[str, Any]] = None) -> LogsResponse:
        return await self._read(LogsResponse, "getLogs", filters)

    # ==================== TOKEN TYPES ====================

    async def get_token_types(self) -> TokenTypesResponse:
        return await self._read(TokenTypesResponse, "getTokenTypes")

    async def create_token_type(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createTokenType", data)

    async def update_token_type(self, token_type: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateTokenType", {"token_type": token_type, **data})

    async def delete_token_type(self, token_type: str, force: bool = False) -> GatewayResponse:
        return await self._write("deleteTokenType", {"token_type": token_type, "force": force})

    async def reset_balance_by_token_type(self, token_type: str) -> GatewayResponse:
        return await self._write("resetBalanceByTokenType", {"token_type": token_type})

    # ==================== MASTERKEYS ====================

    async def get_masterkeys(self) -> MasterKeysResponse:
        return await self._read(MasterKeysResponse, "getMasterkeys")

    async def create_masterkey(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createMasterkey", data)

    async def update_masterkey(self, masterkey_id: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateMasterkey", {"masterkey_id": masterkey_id, **data})

    async def delete_masterkey(self, masterkey_id: str) -> GatewayResponse:
        return await self._write("deleteMasterkey", {"masterkey_id": masterkey_id})

    # ==================== ADMINS ====================

    async def get_admins(self) -> AdminsResponse:
        return await self._read(AdminsResponse, "getAdmins")

    async def create_admin(self, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("createAdmin", data)

    async def update_admin(self, email: str, data: Dict[str, Any]) -> GatewayResponse:
        return await self._write("updateAdmin", {"email": email, **data})

    async def get_admin_log(self, filters: Optional[Dict[str, Any]] = None) -> AdminLogResponse:
        return await self._read(AdminLogResponse, "getAdminLog", filters)

    # ==================== DASHBOARD ====================

    async def get_dashboard_stats(self) -> DashboardStatsResponse:
        return await self._read(DashboardStatsResponse, "getDashboardStats")

    async def get_chart_data(self, filters: Optional[Dict[str, Any]] = None) -> ChartDataResponse:
        return await self._read(ChartDataResponse, "getChartData", filters)
