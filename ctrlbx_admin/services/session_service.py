# =======================================================================================
# ctrlbx_admin/services/session_service.py - Operator Session and Role Store
# =======================================================================================
import logging
from typing import Optional

from ..models.enums import Roles, SESSION_KEYS, Status, StorageKey
from ..models.schemas import Session
from ..utils.exceptions import AuthenticationError, InactiveAccountError
from . import capabilities
from .gateway import RemoteDataGateway
from .storage_service import LocalStorage

logger = logging.getLogger(__name__)

_KNOWN_ROLES = {r.value for r in Roles}


class SessionContext:
    """
    Who is acting on the dashboard.

    There is no server-side session: the identity lives in client storage
    after a successful validateAdmin lookup and is dropped on logout. An
    instance is created once per client and handed to every view service.
    """

    def __init__(self, storage: LocalStorage, gateway: RemoteDataGateway):
        self.storage = storage
        self.gateway = gateway
        self.current_user: Optional[Session] = None

    def init(self) -> bool:
        """Restore a persisted session; no network call."""
        email = self.storage.get_item(StorageKey.USER_EMAIL)
        role = self.storage.get_item(StorageKey.USER_ROLE)
        name = self.storage.get_item(StorageKey.USER_NAME)

        if email and role in _KNOWN_ROLES:
            self.current_user = Session(email=email, role=role, name=name or email)
            return True
        self.current_user = None
        return False

    async def login(self, email: str) -> Session:
        """
        Validate the email against the ADMINS sheet and persist the identity.

        Gateway failures propagate untouched. Nothing is written unless the
        admin exists, is active and carries a known role.
        """
        response = await self.gateway.validate_admin(email)

        if not response.success or response.admin is None:
            raise AuthenticationError("Email not authorized. Check your credentials.")

        admin = response.admin
        if admin.status != Status.ACTIVE.value:
            raise InactiveAccountError("This account is inactive. Contact the administrator.")
        if admin.role not in _KNOWN_ROLES:
            raise AuthenticationError(f"Unknown role '{admin.role}'")

        session = Session(email=admin.email, role=admin.role, name=admin.name or admin.email)
        self.storage.set_items({
            StorageKey.USER_EMAIL: session.email,
            StorageKey.USER_ROLE: session.role,
            StorageKey.USER_NAME: session.name,
        })
        self.current_user = session
        logger.info("Admin %s logged in as %s", session.email, session.role)
        return session

    def logout(self) -> None:
        self.storage.remove_items(SESSION_KEYS)
        self.current_user = None

    # ---------- accessors ----------

    def is_logged_in(self) -> bool:
        return self.current_user is not None

    def get_user(self) -> Optional[Session]:
        return self.current_user

    def get_role(self) -> Optional[str]:
        return self.current_user.role if self.current_user else None

    def get_email(self) -> Optional[str]:
        return self.current_user.email if self.current_user else None

    def has_role(self, role: str) -> bool:
        return self.get_role() == getattr(role, "value", role)

    def is_master(self) -> bool:
        return self.has_role(Roles.MASTER)

    def is_admin(self) -> bool:
        return self.is_master() or self.has_role(Roles.ADMIN)

    # ---------- capabilities ----------

    def can(self, action: str) -> bool:
        return capabilities.can(self.get_role(), action)

    def require(self, action: str) -> None:
        capabilities.require(self.get_role(), action)
