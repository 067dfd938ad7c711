# =======================================================================================
# ctrlbx_admin/utils/exceptions.py - Custom Exceptions
# =======================================================================================
from typing import Optional


class DashboardError(Exception):
    """Base exception for the admin dashboard."""
    pass

class ConfigurationError(DashboardError):
    """Raised when the backend URL is not configured."""
    pass

class GatewayError(DashboardError):
    """Raised on transport failures or non-2xx responses from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class AuthenticationError(DashboardError):
    """Raised when an email is not a registered admin."""
    pass

class InactiveAccountError(AuthenticationError):
    """Raised when the admin record exists but is not active."""
    pass

class NotAuthorizedError(DashboardError):
    """Raised when the current role may not perform an action."""

    def __init__(self, action: str):
        super().__init__(f"Not authorized to perform '{action}'")
        self.action = action

class DomainRejectionError(DashboardError):
    """Raised when the backend answers success=false."""

    def __init__(self, reason: Optional[str], action: Optional[str] = None):
        super().__init__(reason or "Request rejected by backend")
        self.reason = reason
        self.action = action

class ForceDeleteRequired(DomainRejectionError):
    """Deleting would discard user balances; the caller must confirm with force."""
    pass

class InputValidationError(DashboardError):
    """Raised when form input fails client-side validation."""
    pass

class StaleViewError(DashboardError):
    """Raised when a result arrives for a view that has been left."""
    pass
