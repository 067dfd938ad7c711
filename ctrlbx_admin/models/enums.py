# =======================================================================================
# ctrlbx_admin/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum
from typing import Literal

# Type alias for role-typed fields
Role = Literal["MASTER", "ADMIN", "VIEWER"]

class Roles(str, Enum):
    """Admin roles as returned by the backend."""
    MASTER = "MASTER"
    ADMIN = "ADMIN"
    VIEWER = "VIEWER"

class Status(str, Enum):
    """Active-status sentinels used by every backend sheet."""
    ACTIVE = "ACTIVO"
    INACTIVE = "INACTIVO"

class StorageKey(str, Enum):
    """Keys persisted in client storage."""
    BACKEND_URL = "backendUrl"
    USER_EMAIL = "iot_user_email"
    USER_ROLE = "iot_user_role"
    USER_NAME = "iot_user_name"

SESSION_KEYS = (StorageKey.USER_EMAIL, StorageKey.USER_ROLE, StorageKey.USER_NAME)

# Backend error sentinels the dashboard reacts to
USERS_HAVE_BALANCE = "users_have_balance"

# User interaction event types (A-Z)
EVENT_TYPES = (
    "ACCESS_GRANTED",
    "INACTIVE_USER",
    "INVALID_TOKEN_TYPE",
    "MASTERKEY_ACCESS",
    "MASTERKEY_ACCESS_OFFLINE",
    "NO_TOKENS",
    "NOT_IN_HOUSE_USER",
    "OUTSIDE_TIME_WINDOW",
    "UNREGISTERED_USER",
)

EVENT_TYPE_NAMES = {
    "ACCESS_GRANTED": "Acceso Concedido",
    "ACCESS_DENIED": "Acceso Denegado",
    "INACTIVE_USER": "Usuario Inactivo",
    "INVALID_TOKEN_TYPE": "Token Inválido",
    "MASTERKEY_ACCESS": "Acceso Masterkey",
    "MASTERKEY_ACCESS_OFFLINE": "Masterkey Offline",
    "NO_TOKENS": "Sin Tokens",
    "NOT_IN_HOUSE_USER": "Usuario Sin Casa",
    "OUTSIDE_TIME_WINDOW": "Fuera de Horario",
    "UNREGISTERED_USER": "Usuario No Registrado",
    "IN_USE": "En Uso",
    "ERROR": "Error",
    "WIFI_DOWN": "WiFi Caído",
    "WIFI_RESTORED": "WiFi Restaurado",
    "DEVICE_RESTARTED": "Reinicio Dispositivo",
}


def event_type_name(event_type: str) -> str:
    return EVENT_TYPE_NAMES.get(event_type, event_type)
