# =======================================================================================
# ctrlbx_admin/services/capabilities.py - Role Capability Matrix
# =======================================================================================
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional

from ..models.enums import Roles
from ..utils.exceptions import NotAuthorizedError

MASTER = Roles.MASTER.value
ADMIN = Roles.ADMIN.value
VIEWER = Roles.VIEWER.value

_ALL = frozenset({MASTER, ADMIN, VIEWER})
_MANAGERS = frozenset({MASTER, ADMIN})
_MASTER_ONLY = frozenset({MASTER})

CAPABILITIES: Mapping[str, FrozenSet[str]] = MappingProxyType({
    # Users
    "users.view": _ALL,
    "users.create": _MANAGERS,
    "users.edit": _MANAGERS,
    "users.toggleStatus": _MANAGERS,
    "users.adjustTokens": _MANAGERS,

    # Devices
    "devices.view": _ALL,
    "devices.create": _MASTER_ONLY,
    "devices.edit": _MASTER_ONLY,
    "devices.toggleStatus": _MASTER_ONLY,
    "devices.viewHistory": _MASTER_ONLY,

    # Logs
    "logs.view": _ALL,
    "logs.export": _MANAGERS,

    # Roles (admin accounts)
    "roles.view": _MASTER_ONLY,
    "roles.create": _MASTER_ONLY,
    "roles.edit": _MASTER_ONLY,
    "roles.viewAdminLog": _MASTER_ONLY,

    # Token types
    "tokens.view": _MASTER_ONLY,
    "tokens.create": _MASTER_ONLY,
    "tokens.edit": _MASTER_ONLY,
    "tokens.delete": _MASTER_ONLY,

    # Houses
    "houses.view": _MANAGERS,
    "houses.create": _MASTER_ONLY,
    "houses.edit": _MASTER_ONLY,
    "houses.delete": _MASTER_ONLY,

    # Masterkeys
    "masterkeys.view": _MASTER_ONLY,
    "masterkeys.create": _MASTER_ONLY,
    "masterkeys.edit": _MASTER_ONLY,
    "masterkeys.delete": _MASTER_ONLY,

    # Dashboard
    "dashboard.view": _ALL,
})

# page name -> capability needed to navigate there
NAVIGATION: Mapping[str, str] = MappingProxyType({
    "dashboard": "dashboard.view",
    "users": "users.view",
    "devices": "devices.view",
    "logs": "logs.view",
    "houses": "houses.view",
    "tokens": "tokens.view",
    "masterkeys": "masterkeys.view",
    "roles": "roles.view",
})


def can(role: Optional[str], action: str) -> bool:
    """Unknown actions and missing roles are always denied."""
    if not role:
        return False
    allowed = CAPABILITIES.get(action)
    return allowed is not None and role in allowed


def capabilities_for(role: Optional[str]) -> List[str]:
    return [action for action in CAPABILITIES if can(role, action)]


def visible_pages(role: Optional[str]) -> List[str]:
    return [page for page, action in NAVIGATION.items() if can(role, action)]


def require(role: Optional[str], action: str) -> None:
    """Raise before any I/O when the role may not perform the action."""
    if not can(role, action):
        raise NotAuthorizedError(action)


def can_navigate(role: Optional[str], page: str) -> bool:
    action = NAVIGATION.get(page)
    return action is None or can(role, action)
