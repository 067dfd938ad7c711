from datetime import date, datetime, timezone

import pytest

from ctrlbx_admin.models.enums import EVENT_TYPES, event_type_name
from ctrlbx_admin.services.dashboard_service import DashboardService
from ctrlbx_admin.services.filter_state import (
    DateRange,
    DeviceFilter,
    FilterStateController,
    MultiSelect,
    UserFilter,
)
from ctrlbx_admin.services.log_service import LogService


class TestMultiSelect:

    def test_all_checked_is_the_same_as_none(self):
        everything = MultiSelect("house", ["A", "B", "C"], selection=["A", "B", "C"])
        nothing = MultiSelect("house", ["A", "B", "C"])

        assert everything.selection == []
        assert nothing.selection == []
        assert everything.label() == nothing.label() == "Todos"

    def test_toggle_on_then_off_restores_selection(self):
        select = MultiSelect("house", ["A", "B", "C"], selection=["A"])

        select.toggle("B")
        assert select.selection == ["A", "B"]
        select.toggle("B")
        assert select.selection == ["A"]

    def test_unchecking_the_last_value_means_unrestricted(self):
        select = MultiSelect("house", ["A", "B", "C"], selection=["A"])

        select.toggle("A")
        assert select.selection == []
        select.toggle("A")
        assert select.selection == ["A"]

    def test_selection_follows_option_order(self):
        select = MultiSelect("house", ["A", "B", "C"], selection=["C", "A"])
        assert select.selection == ["A", "C"]

    def test_labels(self):
        select = MultiSelect("event", EVENT_TYPES, selection=["ACCESS_GRANTED"], label_fn=event_type_name)
        assert select.label() == "Acceso Concedido"

        select.toggle("NO_TOKENS")
        assert select.label() == "2 sel."

    def test_unknown_values_are_ignored(self):
        select = MultiSelect("house", ["A", "B"], selection=["Z"])
        assert select.selection == []
        select.toggle("Z")
        assert select.checked() == ["A", "B"]

    def test_new_options_join_an_unrestricted_selection(self):
        select = MultiSelect("house", ["A", "B"])
        select.set_options(["A", "B", "C"])
        assert select.checked() == ["A", "B", "C"]

        select.toggle("C")
        select.set_options(["A", "C", "D"])
        assert select.checked() == ["A"]


class TestFilterStateController:

    @pytest.fixture
    def logs(self):
        return [
            {"house_id": "BES_1", "esp32_id": "ESP-1", "event_type": "ACCESS_GRANTED"},
            {"house_id": "BES_2", "esp32_id": "ESP-2", "event_type": "NO_TOKENS"},
            {"house_id": "BES_1", "esp32_id": "ESP-3", "event_type": "NO_TOKENS"},
            {"house_id": None, "esp32_id": "ESP-4", "event_type": "ACCESS_GRANTED"},
        ]

    def test_apply_keeps_upstream_order(self, logs):
        controller = FilterStateController({"house": "house_id", "event": "event_type"})
        controller.build_multi_select("house", ["BES_1", "BES_2", "BES_3"], selection=["BES_2", "BES_1"])
        controller.build_multi_select("event", EVENT_TYPES, selection=["NO_TOKENS"])

        result = controller.apply(logs)

        assert [r["esp32_id"] for r in result] == ["ESP-2", "ESP-3"]

    def test_empty_selection_does_not_filter(self, logs):
        controller = FilterStateController({"house": "house_id"})
        controller.build_multi_select("house", ["BES_1", "BES_2"])
        assert controller.apply(logs) == logs

    def test_unknown_dimension(self):
        controller = FilterStateController({"house": "house_id"})
        with pytest.raises(KeyError):
            controller.build_multi_select("colour", ["red"])

    def test_rebuild_keeps_pending_toggles(self):
        controller = FilterStateController({"house": "house_id"})
        controller.build_multi_select("house", ["A", "B", "C"], selection=["A"])
        controller.toggle("house", "B")

        controller.build_multi_select("house", ["A", "B", "C", "D"])

        assert controller.selection("house") == ["A", "B"]

    def test_chart_query_params(self):
        controller = DashboardService(None, None).chart_filter(
            ["BES_1", "BES_2"], ["LAUNDRY"],
            {"house": ["BES_2"]},
            DateRange(date(2026, 10, 1), date(2026, 10, 19)),
        )

        assert controller.query_params() == {
            "start_date": "2026-10-01",
            "end_date": "2026-10-19",
            "house_ids": "BES_2",
            "event_types": "ACCESS_GRANTED",
        }

    def test_logs_default_to_last_week(self):
        controller = LogService(None, None).logs_filter([], [], [])
        assert (controller.date_range.end - controller.date_range.start).days == 7
        assert controller.query_params() == controller.date_range.as_params()


class TestDeviceFilter:

    NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    @pytest.fixture
    def devices(self):
        return [
            {"esp32_id": "ESP-1", "house_id": "BES_1", "token_type": "LAUNDRY", "active": True,
             "last_seen": "2026-10-19T11:58:00Z"},
            {"esp32_id": "ESP-2", "house_id": "BES_1", "token_type": "GYM", "active": False,
             "last_seen": "2026-10-19T10:00:00Z"},
            {"esp32_id": "ESP-3", "house_id": "BES_2", "token_type": "LAUNDRY", "active": True,
             "last_seen": None},
        ]

    def test_no_filters(self, devices):
        assert DeviceFilter().apply(devices, self.NOW) == devices

    def test_status_and_house(self, devices):
        result = DeviceFilter(house_id="BES_1", status="ACTIVO").apply(devices, self.NOW)
        assert [d["esp32_id"] for d in result] == ["ESP-1"]

    def test_connection(self, devices):
        online = DeviceFilter(connection="ONLINE").apply(devices, self.NOW)
        offline = DeviceFilter(connection="OFFLINE").apply(devices, self.NOW)
        assert [d["esp32_id"] for d in online] == ["ESP-1"]
        assert [d["esp32_id"] for d in offline] == ["ESP-2", "ESP-3"]


class TestUserFilter:

    @pytest.fixture
    def users(self):
        return [
            {"uid": "A1B2", "user_name": "Carla", "status": "ACTIVO"},
            {"uid": "FF00", "user_name": "ana", "status": "INACTIVO"},
            {"uid": "ANA9", "user_name": "Bruno", "status": "ACTIVO"},
        ]

    def test_search_matches_name_or_uid(self, users):
        result = UserFilter(search_term="ANA").apply(users)
        assert [u["uid"] for u in result] == ["FF00", "ANA9"]

    def test_status_and_sort(self, users):
        result = UserFilter(status="ACTIVO", sort_name="desc").apply(users)
        assert [u["user_name"] for u in result] == ["Carla", "Bruno"]

    def test_reset(self, users):
        filters = UserFilter(search_term="x", status="ACTIVO", sort_name="asc")
        filters.reset()
        assert filters.apply(users) == users
