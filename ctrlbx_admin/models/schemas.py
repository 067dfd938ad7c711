# =======================================================================================
# ctrlbx_admin/models/schemas.py - Pydantic Models
# =======================================================================================
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from .enums import Role

from ..utils.validators import format_time_24, to_bool, to_optional_int

# ========== Backend records (normalized at the gateway edge) ==========

class Record(BaseModel):
    """Sheet rows come with extra columns we do not model."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class AdminRecord(Record):
    email: str = Field(validation_alias=AliasChoices("email", "admin_email"))
    role: str
    status: str = "INACTIVO"
    name: Optional[str] = None


class User(Record):
    uid: str
    user_name: str = ""
    status: str = "ACTIVO"
    user_type: str = "GLOBAL"
    tokens: Dict[str, int] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("uid", "user_name", mode="before")
    @classmethod
    def _stringify(cls, v):
        return "" if v is None else str(v)

    @field_validator("user_type", mode="before")
    @classmethod
    def _default_type(cls, v):
        return v or "GLOBAL"

    @field_validator("tokens", mode="before")
    @classmethod
    def _tokens(cls, v):
        return v or {}


class Device(Record):
    esp32_id: str
    location: Optional[str] = None
    house_id: Optional[str] = None
    token_type: Optional[str] = None
    active: bool = False
    time_window_start: str = "08:00"
    time_window_end: str = "23:00"
    time_limit_min: Optional[int] = None
    reconnect_sec: Optional[int] = None
    last_seen: Optional[str] = None

    @field_validator("active", mode="before")
    @classmethod
    def _active(cls, v):
        return to_bool(v)

    @field_validator("time_window_start", mode="before")
    @classmethod
    def _tw_start(cls, v):
        return format_time_24(v, "08:00")

    @field_validator("time_window_end", mode="before")
    @classmethod
    def _tw_end(cls, v):
        return format_time_24(v, "23:00")

    @field_validator("time_limit_min", "reconnect_sec", mode="before")
    @classmethod
    def _optional_int(cls, v):
        return to_optional_int(v)

    @field_validator("last_seen", mode="before")
    @classmethod
    def _last_seen(cls, v):
        return str(v) if v else None


class House(Record):
    house_id: str
    house_img: Optional[str] = None
    house_street: Optional[str] = None
    house_number: Optional[str] = None
    house_extra: Optional[str] = None
    house_postcode: Optional[str] = None
    house_lat: Optional[str] = None
    house_long: Optional[str] = None

    @field_validator("house_number", "house_postcode", "house_lat", "house_long", mode="before")
    @classmethod
    def _stringify(cls, v):
        return None if v is None or v == "" else str(v)


class TokenType(Record):
    token_type: str
    token_name: str = ""
    description: Optional[str] = None
    status: str = "ACTIVO"


class MasterKey(Record):
    masterkey_id: str
    masterkey_holder: Optional[str] = None
    masterkey_level: str = "GLOBAL"
    level_target: Optional[str] = None
    state: str = "ACTIVO"

    @field_validator("masterkey_id", mode="before")
    @classmethod
    def _stringify(cls, v):
        return str(v)


class LogEntry(Record):
    timestamp: Optional[str] = None
    uid: Optional[str] = None
    user_name: Optional[str] = None
    masterkey_holder: Optional[str] = None
    house_id: str = ""
    esp32_id: Optional[str] = None
    token_type: Optional[str] = None
    event_type: Optional[str] = None
    token_balance_after: Optional[int] = None
    is_masterkey_event: bool = False

    @field_validator("house_id", mode="before")
    @classmethod
    def _house(cls, v):
        return v or ""

    @field_validator("is_masterkey_event", mode="before")
    @classmethod
    def _mk(cls, v):
        return to_bool(v)

    @field_validator("token_balance_after", mode="before")
    @classmethod
    def _balance(cls, v):
        return to_optional_int(v)


class UserHouseAssignment(Record):
    uid: str
    house_id: str


class AdminHouseAssignment(Record):
    admin_email: str
    house_id: str


class DashboardStats(Record):
    devicesActive: int = 0
    devicesOffline: int = 0
    accessToday: int = 0
    tokensConsumed: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _zero(cls, v):
        return v or 0


class ChartPoint(Record):
    date: str
    token_type: str
    count: int = 0


# ========== Gateway responses ==========

class GatewayResponse(Record):
    """Envelope common to every backend answer."""
    success: bool = False
    error: Optional[str] = None
    message: Optional[str] = None

    @field_validator("success", mode="before")
    @classmethod
    def _success(cls, v):
        return to_bool(v)


class ValidateAdminResponse(GatewayResponse):
    admin: Optional[AdminRecord] = None

class UsersResponse(GatewayResponse):
    users: List[User] = Field(default_factory=list)

class DevicesResponse(GatewayResponse):
    devices: List[Device] = Field(default_factory=list)

class HousesResponse(GatewayResponse):
    houses: List[House] = Field(default_factory=list)

class AdminHousesResponse(GatewayResponse):
    houses: List[str] = Field(default_factory=list)

class TokenTypesResponse(GatewayResponse):
    token_types: List[TokenType] = Field(default_factory=list)

class MasterKeysResponse(GatewayResponse):
    masterkeys: List[MasterKey] = Field(default_factory=list)

class LogsResponse(GatewayResponse):
    logs: List[LogEntry] = Field(default_factory=list)

class AdminsResponse(GatewayResponse):
    admins: List[AdminRecord] = Field(default_factory=list)

class UserHousesResponse(GatewayResponse):
    assignments: List[UserHouseAssignment] = Field(default_factory=list)

class AllAdminHousesResponse(GatewayResponse):
    assignments: List[AdminHouseAssignment] = Field(default_factory=list)

class DashboardStatsResponse(GatewayResponse):
    stats: DashboardStats = Field(default_factory=DashboardStats)

class ChartDataResponse(GatewayResponse):
    chart_data: List[ChartPoint] = Field(default_factory=list)

class UserTokensResponse(GatewayResponse):
    tokens: Dict[str, int] = Field(default_factory=dict)

class AdminLogResponse(GatewayResponse):
    entries: List[Dict[str, Any]] = Field(
        default_factory=list, validation_alias=AliasChoices("entries", "logs")
    )


# ========== Session ==========

class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    role: Role
    name: str


# ========== Dashboard HTTP surface ==========

class LoginRequest(BaseModel):
    email: str

class SessionResponse(BaseModel):
    loggedIn: bool
    user: Optional[Session] = None
    capabilities: List[str] = Field(default_factory=list)
    pages: List[str] = Field(default_factory=list)

class BackendUrlRequest(BaseModel):
    url: str

class BackendUrlResponse(BaseModel):
    url: str

class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    level: str = "error"

class HealthResponse(BaseModel):
    status: str                 # "ok" | "error"
    backendConfigured: bool
    message: Optional[str] = None

class CreateUserRequest(BaseModel):
    uid: str
    user_name: str
    user_type: str = "GLOBAL"

class UpdateUserRequest(BaseModel):
    user_name: Optional[str] = None
    user_type: Optional[str] = None
    status: Optional[str] = None

class TokenBalanceRequest(BaseModel):
    token_type: str
    delta: int

class AssignHousesRequest(BaseModel):
    house_ids: List[str] = Field(default_factory=list)

class DeviceRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    esp32_id: Optional[str] = None
    location: Optional[str] = None
    house_id: Optional[str] = None
    token_type: Optional[str] = None
    active: Optional[bool] = None
    time_limit_min: Optional[int] = None
    time_window_start: Optional[str] = None
    time_window_end: Optional[str] = None
    wifi_ssid: Optional[str] = None
    wifi_password: Optional[str] = None

class HouseRequest(BaseModel):
    house_id: Optional[str] = None
    house_img: Optional[str] = None
    house_street: Optional[str] = None
    house_number: Optional[str] = None
    house_extra: Optional[str] = None
    house_postcode: Optional[str] = None
    house_lat: Optional[str] = None
    house_long: Optional[str] = None

class TokenTypeRequest(BaseModel):
    token_type: Optional[str] = None
    token_name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

class MasterKeyRequest(BaseModel):
    masterkey_id: Optional[str] = None
    masterkey_holder: Optional[str] = None
    masterkey_level: Optional[str] = None
    level_target: Optional[str] = None
    state: Optional[str] = None

class AdminRequest(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
