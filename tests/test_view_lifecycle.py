import asyncio

import pytest

from ctrlbx_admin.services.device_service import DeviceService
from ctrlbx_admin.services.view_lifecycle import CancellationToken, ViewNavigator, gather
from ctrlbx_admin.utils.exceptions import NotAuthorizedError, StaleViewError


async def slow(value, delay=5):
    await asyncio.sleep(delay)
    return value


class TestNavigator:

    def test_navigating_away_cancels_previous_view(self):
        navigator = ViewNavigator()
        logs = navigator.navigate("logs")

        devices = navigator.navigate("devices")

        assert logs.cancelled
        assert not devices.cancelled
        assert navigator.current is devices

    def test_same_view_keeps_its_token(self):
        navigator = ViewNavigator()
        first = navigator.navigate("users")
        assert navigator.navigate("users") is first

    def test_navigation_checks_capabilities(self):
        navigator = ViewNavigator()
        current = navigator.navigate("dashboard", "VIEWER")

        with pytest.raises(NotAuthorizedError):
            navigator.navigate("roles", "VIEWER")

        assert navigator.current is current
        assert not current.cancelled


class TestGather:

    @pytest.mark.asyncio
    async def test_results_in_order(self):
        token = CancellationToken("dashboard")
        assert await gather(token, slow(1, 0.01), slow(2, 0)) == [1, 2]

    @pytest.mark.asyncio
    async def test_leaving_mid_flight_discards_results(self):
        navigator = ViewNavigator()
        token = navigator.navigate("logs")
        pending = asyncio.ensure_future(gather(token, slow("logs"), slow("houses")))
        await asyncio.sleep(0)

        navigator.navigate("devices")

        with pytest.raises(StaleViewError):
            await pending

    @pytest.mark.asyncio
    async def test_late_results_are_discarded(self):
        token = CancellationToken("logs")

        async def finish_then_leave():
            token.cancelled = True
            return "rows"

        with pytest.raises(StaleViewError):
            await gather(token, finish_then_leave())

    @pytest.mark.asyncio
    async def test_cancelled_token_starts_nothing(self):
        token = CancellationToken("logs")
        token.cancel()
        started = []

        async def fetch():
            started.append(True)

        with pytest.raises(StaleViewError):
            await gather(token, fetch())
        assert started == []


class TestViewServiceCancellation:

    @pytest.mark.asyncio
    async def test_left_view_never_renders(self, login_as, gateway, backend):
        session = login_as("MASTER")
        navigator = ViewNavigator()
        token = navigator.navigate("devices")
        navigator.leave()

        with pytest.raises(StaleViewError):
            await DeviceService(session, gateway).load(token=token)
        assert backend.requests == []
