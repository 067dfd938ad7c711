# =======================================================================================
# ctrlbx_admin/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "DashboardError", "ConfigurationError", "GatewayError", "AuthenticationError",
    "InactiveAccountError", "NotAuthorizedError", "DomainRejectionError",
    "ForceDeleteRequired", "InputValidationError", "StaleViewError",
    "to_bool", "to_optional_int", "parse_timestamp", "format_time_24", "is_device_online",
]
