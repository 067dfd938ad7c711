import pytest

from ctrlbx_admin.models.enums import SESSION_KEYS, StorageKey
from ctrlbx_admin.utils.exceptions import (
    AuthenticationError,
    GatewayError,
    InactiveAccountError,
)


def admin_reply(role="ADMIN", status="ACTIVO", name="Ana Pérez", email="ana@ctrlbx.test"):
    admin = {"admin_email": email, "role": role, "status": status}
    if name is not None:
        admin["name"] = name
    return {"success": True, "admin": admin}


def stored_session(storage):
    return [storage.get_item(key) for key in SESSION_KEYS]


class TestLogin:

    @pytest.mark.asyncio
    async def test_success_persists_identity(self, session, storage, backend):
        backend.on("validateAdmin", admin_reply())

        user = await session.login("ana@ctrlbx.test")

        assert user.role == "ADMIN"
        assert session.is_logged_in()
        assert session.is_admin() and not session.is_master()
        assert stored_session(storage) == ["ana@ctrlbx.test", "ADMIN", "Ana Pérez"]
        assert backend.last("validateAdmin")["params"]["email"] == "ana@ctrlbx.test"

    @pytest.mark.asyncio
    async def test_name_falls_back_to_email(self, session, storage, backend):
        backend.on("validateAdmin", admin_reply(name=None))

        user = await session.login("ana@ctrlbx.test")

        assert user.name == "ana@ctrlbx.test"
        assert storage.get_item(StorageKey.USER_NAME) == "ana@ctrlbx.test"

    @pytest.mark.asyncio
    async def test_inactive_account_rejected(self, session, storage, backend):
        backend.on("validateAdmin", admin_reply(status="INACTIVO"))

        with pytest.raises(InactiveAccountError):
            await session.login("ana@ctrlbx.test")

        assert not session.is_logged_in()
        assert stored_session(storage) == [None, None, None]

    @pytest.mark.asyncio
    async def test_unknown_email_rejected(self, session, storage, backend):
        backend.on("validateAdmin", {"success": False, "error": "Admin not found"})

        with pytest.raises(AuthenticationError):
            await session.login("nobody@ctrlbx.test")

        assert stored_session(storage) == [None, None, None]

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, session, storage, backend):
        backend.on("validateAdmin", admin_reply(role="SUPERUSER"))

        with pytest.raises(AuthenticationError):
            await session.login("ana@ctrlbx.test")

        assert storage.get_item(StorageKey.USER_ROLE) is None

    @pytest.mark.asyncio
    async def test_network_failure_propagates(self, session, storage, backend):
        backend.fail("validateAdmin")

        with pytest.raises(GatewayError):
            await session.login("ana@ctrlbx.test")

        assert stored_session(storage) == [None, None, None]


class TestRestoreAndLogout:

    def test_init_restores_persisted_session(self, session, storage):
        storage.set_items({
            StorageKey.USER_EMAIL: "m@ctrlbx.test",
            StorageKey.USER_ROLE: "MASTER",
        })

        assert session.init() is True
        assert session.is_master()
        assert session.get_user().name == "m@ctrlbx.test"

    def test_init_without_role_is_logged_out(self, session, storage):
        storage.set_item(StorageKey.USER_EMAIL, "m@ctrlbx.test")

        assert session.init() is False
        assert session.get_role() is None

    def test_logout_clears_identity_but_keeps_backend_url(self, login_as, storage):
        session = login_as("MASTER")

        session.logout()

        assert not session.is_logged_in()
        assert stored_session(storage) == [None, None, None]
        assert storage.get_item(StorageKey.BACKEND_URL) is not None

    def test_logged_out_session_can_do_nothing(self, session):
        assert not session.can("dashboard.view")
