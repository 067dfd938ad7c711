import json

import httpx
import pytest

from ctrlbx_admin.config import config
from ctrlbx_admin.models.enums import StorageKey
from ctrlbx_admin.services.gateway import RemoteDataGateway, ensure_success
from ctrlbx_admin.models.schemas import GatewayResponse
from ctrlbx_admin.utils.exceptions import (
    ConfigurationError,
    DomainRejectionError,
    ForceDeleteRequired,
    GatewayError,
)


class TestRequestShape:

    @pytest.mark.asyncio
    async def test_reads_are_get_with_action_in_query(self, gateway, backend, backend_url):
        await gateway.get_user_tokens("A1B2")

        call = backend.last("getUserTokens")
        assert call["method"] == "GET"
        assert call["params"] == {"action": "getUserTokens", "uid": "A1B2"}
        assert str(call["request"].url).startswith(backend_url)

    @pytest.mark.asyncio
    async def test_unset_params_are_not_sent(self, gateway, backend):
        await gateway.get_devices()
        assert backend.last("getDevices")["params"] == {"action": "getDevices"}

    @pytest.mark.asyncio
    async def test_mutations_post_json_as_text_plain(self, gateway, backend):
        await gateway.update_token_balance("A1B2", "LAUNDRY", -2)

        call = backend.last("updateTokenBalance")
        request = call["request"]
        assert call["method"] == "POST"
        assert request.headers["content-type"] == "text/plain;charset=utf-8"
        assert json.loads(request.content) == {
            "action": "updateTokenBalance", "uid": "A1B2", "token_type": "LAUNDRY", "delta": -2,
        }

    @pytest.mark.asyncio
    async def test_assignment_payloads(self, gateway, backend):
        await gateway.assign_house_admin("BES_1", ["a@ctrlbx.test"])
        await gateway.assign_user_houses("A1B2", ["BES_1", "BES_2"])

        assert backend.last("assignHouseAdmin")["params"]["admin_emails"] == ["a@ctrlbx.test"]
        assert backend.last("assignUserHouses")["params"]["house_ids"] == ["BES_1", "BES_2"]

    @pytest.mark.asyncio
    async def test_redirects_are_followed(self, storage, backend_url):
        def handler(request):
            if request.url.host == "script.example.com":
                return httpx.Response(302, headers={"Location": "https://content.example.com/echo?x=1"})
            return httpx.Response(200, json={"success": True, "houses": [{"house_id": "BES_1"}]})

        gateway = RemoteDataGateway(storage, transport=httpx.MockTransport(handler))
        gateway.set_base_url(backend_url)

        response = await gateway.get_houses()

        assert [h.house_id for h in response.houses] == ["BES_1"]


class TestEndpointConfiguration:

    @pytest.mark.asyncio
    async def test_missing_url_fails_before_any_request(self, storage, backend, monkeypatch):
        monkeypatch.setattr(config, "BACKEND_URL", "")
        gateway = RemoteDataGateway(storage, transport=backend.transport)

        with pytest.raises(ConfigurationError):
            await gateway.get_users()
        assert backend.requests == []

    def test_url_is_persisted(self, gateway, storage):
        gateway.set_base_url("  https://script.example.com/other  ")
        assert storage.get_item(StorageKey.BACKEND_URL) == "https://script.example.com/other"

    def test_env_url_is_the_fallback(self, storage, monkeypatch):
        monkeypatch.setattr(config, "BACKEND_URL", "https://env.example.com/exec")
        assert RemoteDataGateway(storage).base_url == "https://env.example.com/exec"


class TestFailures:

    @pytest.mark.asyncio
    async def test_http_error_carries_status(self, gateway, backend):
        backend.on("getUsers", {"error": "boom"}, status_code=500)

        with pytest.raises(GatewayError) as exc_info:
            await gateway.get_users()

        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "HTTP error! status: 500"

    @pytest.mark.asyncio
    async def test_network_error(self, gateway, backend):
        backend.fail("getHouses")
        with pytest.raises(GatewayError) as exc_info:
            await gateway.get_houses()
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_record(self, gateway, backend):
        backend.on("getUsers", {"success": True, "users": [{"user_name": "no uid"}]})
        with pytest.raises(GatewayError):
            await gateway.get_users()

    @pytest.mark.asyncio
    async def test_domain_rejection_is_returned_not_raised(self, gateway, backend):
        backend.on("createHouse", {"success": False, "error": "House exists"})

        response = await gateway.create_house({"house_id": "BES_1"})

        assert response.success is False
        assert response.error == "House exists"


class TestEnsureSuccess:

    def test_passes_success_through(self):
        response = GatewayResponse(success=True)
        assert ensure_success(response, "x") is response

    def test_rejection(self):
        with pytest.raises(DomainRejectionError) as exc_info:
            ensure_success(GatewayResponse(success=False, error="House exists"), "houses.create")
        assert exc_info.value.reason == "House exists"
        assert not isinstance(exc_info.value, ForceDeleteRequired)

    def test_balance_sentinel(self):
        with pytest.raises(ForceDeleteRequired):
            ensure_success(GatewayResponse(success=False, error="users_have_balance"), "tokens.delete")

    def test_string_success_flag(self):
        assert GatewayResponse.model_validate({"success": "TRUE"}).success is True
