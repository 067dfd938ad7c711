# =======================================================================================
# ctrlbx_admin/services/__init__.py - Services Package
# =======================================================================================
from .storage_service import LocalStorage
from .gateway import RemoteDataGateway
from .session_service import SessionContext
from .view_lifecycle import CancellationToken, ViewNavigator
from .dashboard_service import DashboardService
from .user_service import UserService
from .device_service import DeviceService
from .log_service import LogService
from .house_service import HouseService
from .token_service import TokenTypeService
from .masterkey_service import MasterKeyService
from .role_service import RoleService

__all__ = [
    "LocalStorage",
    "RemoteDataGateway",
    "SessionContext",
    "CancellationToken",
    "ViewNavigator",
    "DashboardService",
    "UserService",
    "DeviceService",
    "LogService",
    "HouseService",
    "TokenTypeService",
    "MasterKeyService",
    "RoleService",
]
