# =======================================================================================
# ctrlbx_admin/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "Session", "AdminRecord", "User", "Device", "House", "TokenType", "MasterKey",
    "LogEntry", "DashboardStats", "ChartPoint", "GatewayResponse",
    "Role", "Roles", "Status", "StorageKey", "EVENT_TYPES",
]
