"""
Tests for the cookie listing controller.
"""

import pytest
from PySide6.QtCore import SIGNAL

from app.services.storage_signal import StorageEvents
from core.cookies import CookieListingController, MemoryCookieSource, compute_key
from core.cookies.persistence import SELECTED_FILTERS_FIELD

from tests.fixtures.cookies import make_cookie


def names(controller):
    return [record.parsed_cookie.name for record in controller.filtered_records]


def add_cookies(source, *records):
    source.replace(list(source.cookies_for_frame().values()) + list(records))


@pytest.fixture
def storage_events():
    return StorageEvents()


@pytest.fixture
def controller(cookie_source, preference_store, storage_events):
    controller = CookieListingController(
        cookie_source, store=preference_store, storage_signal=storage_events.storage_changed
    )
    controller.open()
    yield controller
    controller.close()


@pytest.fixture
def abc_source():
    return MemoryCookieSource([make_cookie(name) for name in ("A", "B", "C")])


@pytest.fixture
def abc_controller(abc_source):
    controller = CookieListingController(abc_source)
    controller.open("main")
    return controller


class TestOpenAndRefresh:

    def test_open_lists_all_frames(self, controller):
        assert names(controller) == ["session_id", "_ga", "ad_id", "pref"]
        assert controller.frame is None
        assert list(controller.filter_options["analytics.category"]) == ["Functional", "Analytics", "Marketing"]

    def test_open_subscribes_to_collaborators(self, controller, cookie_source, storage_events):
        assert cookie_source.receivers(SIGNAL("changed()")) == 1
        assert storage_events.receivers(SIGNAL("storage_changed()")) == 1

    def test_close_unsubscribes(self, cookie_source, storage_events):
        controller = CookieListingController(cookie_source, storage_signal=storage_events.storage_changed)
        controller.open()
        controller.close()
        assert cookie_source.receivers(SIGNAL("changed()")) == 0
        assert storage_events.receivers(SIGNAL("storage_changed()")) == 0

        cookie_source.replace([make_cookie("late")])
        assert "late" not in names(controller)
        assert controller.selected_filters == {}

    def test_close_twice_is_safe(self, controller):
        controller.close()
        controller.close()

    def test_source_changes_refresh_listing(self, controller, cookie_source):
        add_cookies(cookie_source, make_cookie("new_cookie", frames=("main",)))
        assert "new_cookie" in names(controller)

    def test_changed_emitted(self, controller):
        calls = []
        controller.changed.connect(lambda: calls.append(1))
        controller.set_search("ga")
        assert calls == [1]
        assert names(controller) == ["_ga"]


class TestFacets:

    def test_toggle_filters_listing(self, controller):
        controller.toggle_filter("is_first_party", "Third Party", True)
        assert names(controller) == ["ad_id"]
        controller.toggle_filter("is_first_party", "Third Party", False)
        assert len(names(controller)) == 4
        assert controller.selected_filters == {}

    def test_toggle_persists_under_frame_key(self, controller, preference_store):
        controller.toggle_filter("analytics.category", "Analytics", True)
        assert preference_store.get("cookieListing#*", SELECTED_FILTERS_FIELD) == {
            "analytics.category": ["Analytics"]
        }
        assert preference_store.get("cookieListing", SELECTED_FILTERS_FIELD) is None

    def test_generic_facet_persists_under_shared_key(self, controller, preference_store):
        controller.toggle_filter("blocked_reasons", "ThirdPartyPhaseout", True)
        assert preference_store.get("cookieListing", SELECTED_FILTERS_FIELD) == {
            "blocked_reasons": ["ThirdPartyPhaseout"]
        }
        assert names(controller) == ["ad_id"]

    def test_clear_filters(self, controller):
        controller.set_selected_filters({"analytics.category": ["Analytics"], "blocked_reasons": ["SecureOnly"]})
        controller.clear_facet("blocked_reasons")
        assert controller.selected_filters == {"analytics.category": {"Analytics"}}
        controller.clear_filters()
        assert controller.selected_filters == {}

    def test_selection_restored_by_new_controller(self, cookie_source, preference_store):
        first = CookieListingController(cookie_source, store=preference_store)
        first.open()
        first.toggle_filter("analytics.category", "Marketing", True)
        first.close()

        second = CookieListingController(cookie_source, store=preference_store)
        second.open()
        assert second.selected_filters == {"analytics.category": {"Marketing"}}
        assert names(second) == ["ad_id"]

    def test_failing_store_keeps_working(self, cookie_source, failing_store):
        controller = CookieListingController(cookie_source, store=failing_store)
        controller.open("main")
        controller.toggle_filter("analytics.category", "Analytics", True)
        assert names(controller) == ["_ga"]


class TestFrameSwitch:

    def test_specific_selection_does_not_follow(self, controller):
        controller.set_frame("main")
        controller.toggle_filter("analytics.category", "Marketing", True)
        controller.toggle_filter("blocked_reasons", "ThirdPartyPhaseout", True)

        controller.set_frame("https://ads.tracker.net")
        assert controller.selected_filters == {"blocked_reasons": {"ThirdPartyPhaseout"}}
        assert names(controller) == ["ad_id"]

    def test_returning_restores_frame_selection(self, controller):
        controller.set_frame("main")
        controller.toggle_filter("analytics.category", "Marketing", True)
        controller.set_frame("https://widgets.example.com")
        controller.set_frame("main")
        assert controller.selected_filters == {"analytics.category": {"Marketing"}}

    def test_switch_resets_selection(self, controller, sample_cookies):
        controller.set_frame("main")
        controller.select(compute_key(sample_cookies[0]))
        controller.set_frame("https://widgets.example.com")
        assert controller.selected_key is None

    def test_frame_scopes_records(self, controller):
        controller.set_frame("https://widgets.example.com")
        assert names(controller) == ["pref"]

    def test_sorting_is_per_frame(self, controller):
        controller.set_frame("main")
        controller.set_sorting("parsed_cookie.name")
        assert names(controller) == ["_ga", "ad_id", "session_id"]
        controller.set_frame("https://ads.tracker.net")
        assert controller.sorting is None
        controller.set_frame("main")
        assert controller.sorting == {"key": "parsed_cookie.name", "descending": False}


class TestSelection:

    def test_select_absent_key_is_idle(self, controller):
        assert controller.select("missing;x;/") is None
        assert controller.selected_key is None
        assert not controller.can_delete_selected

    def test_filtered_away_selection_drops(self, controller, sample_cookies):
        controller.select(compute_key(sample_cookies[0]))
        assert controller.selected_record == sample_cookies[0]
        controller.toggle_filter("is_first_party", "Third Party", True)
        assert controller.selected_key is None

    def test_select_index(self, abc_controller):
        assert abc_controller.select_index(1) == "B;example.com;/"
        assert abc_controller.select_index(7) is None


class TestDeletion:

    def test_delete_middle_selects_successor(self, abc_controller, abc_source):
        abc_controller.select("B;example.com;/")
        assert abc_controller.delete_selected() == "B;example.com;/"
        assert "B;example.com;/" not in abc_source
        assert abc_controller.selected_key == "C;example.com;/"

    def test_delete_last_selects_previous(self, abc_controller):
        abc_controller.select("C;example.com;/")
        abc_controller.delete_selected()
        assert abc_controller.selected_key == "B;example.com;/"

    def test_delete_only_row_goes_idle(self):
        controller = CookieListingController(MemoryCookieSource([make_cookie("A")]))
        controller.open()
        controller.select("A;example.com;/")
        controller.delete_selected()
        assert controller.selected_key is None
        assert controller.filtered_records == []

    def test_repeated_delete_walks_list(self, abc_controller):
        abc_controller.select("A;example.com;/")
        deleted = [abc_controller.delete_selected() for _ in range(3)]
        assert deleted == ["A;example.com;/", "B;example.com;/", "C;example.com;/"]
        assert abc_controller.delete_selected() is None

    def test_nothing_selected(self, abc_controller, abc_source):
        assert abc_controller.delete_selected() is None
        assert len(abc_source) == 3

    def test_single_notification(self, abc_controller):
        calls = []
        abc_controller.changed.connect(lambda: calls.append(1))
        abc_controller.select("A;example.com;/")
        calls.clear()
        abc_controller.delete_selected()
        assert calls == [1]

    def test_sink_error_propagates(self, abc_controller, abc_source, monkeypatch):
        def refuse(key):
            raise PermissionError("read-only store")

        monkeypatch.setattr(abc_source, "delete", refuse)
        abc_controller.select("A;example.com;/")
        with pytest.raises(PermissionError):
            abc_controller.delete_selected()
        assert len(abc_controller.filtered_records) == 3
        assert abc_controller.selected_key == "A;example.com;/"

    def test_delete_all(self, abc_controller, abc_source):
        abc_controller.select("A;example.com;/")
        abc_controller.delete_all()
        assert len(abc_source) == 0
        assert abc_controller.filtered_records == []
        assert abc_controller.selected_key is None


class TestHighlights:

    def test_refresh_keeps_highlight(self, controller, cookie_source, sample_cookies):
        key = compute_key(sample_cookies[0])
        assert controller.highlight(key)
        add_cookies(cookie_source, make_cookie("other"))
        assert controller.record(key).highlighted is True

    def test_storage_change_clears_highlights(self, controller, storage_events, sample_cookies):
        key = compute_key(sample_cookies[1])
        controller.toggle_filter("analytics.category", "Analytics", True)
        controller.highlight(key)
        controller.select(key)

        storage_events.storage_changed.emit()
        assert controller.record(key).highlighted is False
        assert controller.selected_filters == {"analytics.category": {"Analytics"}}
        assert controller.selected_key == key

    def test_highlight_unknown_key(self, controller):
        assert controller.highlight("nope;x;/") is False
