"""Shared test fixtures: a fake spreadsheet backend behind httpx.MockTransport."""
import json
import os

# Keep the developer's .env out of the test run
os.environ.setdefault("BACKEND_URL", "")
os.environ.setdefault("API_DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ctrlbx_admin.config import config  # noqa: E402
from ctrlbx_admin.database import DatabaseManager  # noqa: E402
from ctrlbx_admin.main import create_app  # noqa: E402
from ctrlbx_admin.models.enums import StorageKey  # noqa: E402
from ctrlbx_admin.services.gateway import RemoteDataGateway  # noqa: E402
from ctrlbx_admin.services.session_service import SessionContext  # noqa: E402
from ctrlbx_admin.services.storage_service import LocalStorage  # noqa: E402

BACKEND_URL = "https://script.example.com/macros/s/test/exec"


class FakeBackend:
    """
    Answers gateway calls by action name and records every request.

    Unregistered actions answer {"success": true}, which the response models
    turn into empty lists.
    """

    def __init__(self):
        self.replies = {}
        self.requests = []

    def on(self, action, payload=None, status_code=200):
        self.replies[action] = (status_code, payload if payload is not None else {"success": True})

    def fail(self, action):
        """Make an action fail at the network level."""
        self.replies[action] = "network"

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            params = dict(request.url.params)
        else:
            params = json.loads(request.content)
        action = params.get("action")
        self.requests.append({"method": request.method, "action": action, "params": params, "request": request})

        reply = self.replies.get(action, (200, {"success": True}))
        if reply == "network":
            raise httpx.ConnectError("connection refused", request=request)
        status_code, payload = reply
        return httpx.Response(status_code, json=payload)

    def actions(self, method=None):
        return [r["action"] for r in self.requests if method is None or r["method"] == method]

    def last(self, action):
        return [r for r in self.requests if r["action"] == action][-1]

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend_url():
    return BACKEND_URL


@pytest.fixture
def db(tmp_path):
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'client_state.db'}")
    yield manager
    manager.dispose()


@pytest.fixture
def storage(db):
    return LocalStorage(db)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gateway(storage, backend):
    gw = RemoteDataGateway(storage, transport=backend.transport)
    gw.set_base_url(BACKEND_URL)
    return gw


@pytest.fixture
def session(storage, gateway):
    return SessionContext(storage, gateway)


@pytest.fixture
def login_as(storage, session):
    """Restore a persisted identity without a validateAdmin round trip."""

    def _login(role, email=None):
        email = email or f"{role.lower()}@ctrlbx.test"
        storage.set_items({
            StorageKey.USER_EMAIL: email,
            StorageKey.USER_ROLE: role,
            StorageKey.USER_NAME: role.title(),
        })
        assert session.init()
        return session

    return _login


@pytest.fixture
def client(db, backend, monkeypatch):
    monkeypatch.setattr(config, "BACKEND_URL", "")
    app = create_app(db_manager=db, transport=backend.transport)
    return TestClient(app)


@pytest.fixture
def logged_in_client(client, backend):
    """Configured backend URL and a session for the requested role."""

    def _client(role="MASTER", email="op@ctrlbx.test"):
        client.put("/api/config/backend-url", json={"url": BACKEND_URL})
        backend.on("validateAdmin", {
            "success": True,
            "admin": {"admin_email": email, "role": role, "status": "ACTIVO", "name": "Operator"},
        })
        response = client.post("/api/auth/login", json={"email": email})
        assert response.status_code == 200
        backend.requests.clear()
        return client

    return _client
