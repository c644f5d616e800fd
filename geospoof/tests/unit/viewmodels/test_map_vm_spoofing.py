from __future__ import annotations

from geospoof.domain.entities import AuthorizationStatus, Coordinate, EditorKind, LocationPoint
from geospoof.domain.errors import NO_SELECTION_FOR_BOOKMARK, SpoofErrorKind
from geospoof.tests.unit.helpers import build_map_harness
from geospoof.viewmodels.map_vm import ANIMATION_DEFAULT, ANIMATION_SPRING, DEFAULT_CENTER
from geospoof.viewmodels.settings_vm import LocSimSettings
from geospoof.viewmodels.status_format import (
    BUTTON_START,
    BUTTON_STOP,
    STATUS_ACTIVE_TITLE,
    STATUS_INACTIVE_DETAIL,
    STATUS_INACTIVE_TITLE,
)


def test_initial_state(tmp_path):
    h = build_map_harness(str(tmp_path))
    vm = h.vm

    assert vm.map_region.center == DEFAULT_CENTER
    assert vm.status_info.title == STATUS_INACTIVE_TITLE
    assert vm.status_info.detail == STATUS_INACTIVE_DETAIL
    assert vm.primary_button_title == BUTTON_START
    assert vm.primary_button_disabled is True
    assert vm.show_error_alert is False


def test_tap_selects_and_last_tap_wins(tmp_path):
    h = build_map_harness(str(tmp_path))

    h.vm.handle_map_tap(Coordinate(10, 10))
    h.vm.handle_map_tap(Coordinate(20, 20))

    assert h.vm.selected_location == LocationPoint(Coordinate(20, 20))
    assert h.vm.map_region.center == Coordinate(20, 20)
    assert h.vm.map_animation == ANIMATION_SPRING
    assert h.vm.primary_button_disabled is False


def test_tap_without_auto_center_keeps_region(tmp_path):
    settings = LocSimSettings(auto_center_on_selection=False, damped_animations=False)
    h = build_map_harness(str(tmp_path), settings=settings)

    h.vm.handle_map_tap(Coordinate(20, 20))

    assert h.vm.map_region.center == DEFAULT_CENTER
    assert h.vm.map_animation == ANIMATION_DEFAULT


def test_toggle_starts_at_selected_point(tmp_path):
    h = build_map_harness(str(tmp_path))
    h.vm.handle_map_tap(Coordinate(39.90, 116.40))

    h.vm.toggle_spoofing()

    assert h.simulator.calls == [("clear",), ("set", 39.90, 116.40), ("timezone",)]
    assert h.vm.is_spoofing_active
    assert h.vm.session.is_active
    assert h.vm.status_info.title == STATUS_ACTIVE_TITLE
    assert h.vm.status_info.detail == "39.90000, 116.40000"
    assert h.vm.primary_button_title == BUTTON_STOP
    assert h.vm.primary_button_disabled is False


def test_start_without_selection_reports_error(tmp_path):
    h = build_map_harness(str(tmp_path))

    h.vm.toggle_spoofing()

    assert h.simulator.calls == []
    assert h.engine.last_error is SpoofErrorKind.INVALID_COORDINATE
    assert h.vm.show_error_alert is True
    assert h.vm.error_message == SpoofErrorKind.INVALID_COORDINATE.message

    h.vm.dismiss_error()
    assert h.vm.show_error_alert is False
    assert h.vm.error_message is None


def test_stop_clears_last_used_and_refreshes_location(tmp_path):
    h = build_map_harness(str(tmp_path))
    bookmark = h.store.add_bookmark("Home", Coordinate(5, 5))
    h.vm.focus(bookmark, auto_start_override=True)
    assert h.store.last_used_bookmark_id == bookmark.id
    h.service.calls.clear()

    h.vm.toggle_spoofing()

    assert not h.vm.is_spoofing_active
    assert h.simulator.calls[-2:] == [("clear",), ("timezone",)]
    assert h.store.last_used_bookmark_id is None
    assert h.service.calls == ["stop"]
    assert h.vm.has_centered_on_user is False
    assert h.vm.primary_button_title == BUTTON_START


def test_focus_respects_auto_start_setting(tmp_path):
    h = build_map_harness(str(tmp_path))
    bookmark = h.store.add_bookmark("Office", Coordinate(31.2, 121.5), note="3F")

    h.vm.focus(bookmark)

    assert h.vm.selected_location == LocationPoint(Coordinate(31.2, 121.5), label="Office", note="3F")
    assert h.vm.map_region.center == Coordinate(31.2, 121.5)
    assert h.simulator.calls == []

    h_auto = build_map_harness(str(tmp_path / "auto"), settings=LocSimSettings(auto_start_from_bookmarks=True))
    other = h_auto.store.add_bookmark("Office", Coordinate(31.2, 121.5))
    h_auto.vm.focus(other)
    assert h_auto.vm.status_info.detail == "Office"
    assert h_auto.store.last_used_bookmark_id == other.id


def test_starting_from_map_clears_last_used_bookmark(tmp_path):
    h = build_map_harness(str(tmp_path))
    bookmark = h.store.add_bookmark("Home", Coordinate(5, 5))
    h.vm.focus(bookmark, auto_start_override=True)

    h.vm.handle_map_tap(Coordinate(6, 6))
    h.vm.start_spoofing_selected()

    assert h.simulator.current == (6.0, 6.0)
    assert h.store.last_used_bookmark_id is None


def test_first_fix_centres_map_once(tmp_path):
    h = build_map_harness(str(tmp_path))
    now = h.timers.clock()

    h.service.emit_fix(Coordinate(1, 1), now)
    h.service.emit_fix(Coordinate(2, 2), now)

    assert h.vm.has_centered_on_user is True
    assert h.vm.map_region.center == Coordinate(1, 1)
    assert h.vm.real_location == Coordinate(2, 2)


def test_fix_does_not_centre_while_spoofing(tmp_path):
    h = build_map_harness(str(tmp_path))
    h.vm.handle_map_tap(Coordinate(7, 7))
    h.vm.toggle_spoofing()

    h.service.emit_fix(Coordinate(1, 1), h.timers.clock())

    assert h.vm.map_region.center == Coordinate(7, 7)
    assert h.vm.has_centered_on_user is False


def test_fix_after_stop_recentres(tmp_path):
    h = build_map_harness(str(tmp_path))
    h.service.emit_fix(Coordinate(1, 1), h.timers.clock())
    h.vm.handle_map_tap(Coordinate(7, 7))
    h.vm.toggle_spoofing()
    h.vm.toggle_spoofing()

    h.service.emit_fix(Coordinate(3, 3), h.timers.clock())

    assert h.vm.map_region.center == Coordinate(3, 3)


def test_permission_flow_refreshes_then_centres(tmp_path):
    h = build_map_harness(str(tmp_path), home=Coordinate(22.3, 114.2))
    h.service.grant = AuthorizationStatus.AUTHORIZED_ALWAYS

    h.vm.request_location_permission()

    assert h.service.calls[0] == "request_always"
    assert h.vm.map_region.center == DEFAULT_CENTER

    h.timers.advance(500)
    assert "stop" in h.service.calls
    h.timers.advance(200)
    assert h.service.calls[-1] == "request_location"
    h.timers.advance(800)
    assert h.vm.map_region.center == Coordinate(22.3, 114.2)
    assert h.vm.has_centered_on_user is True


def test_permission_flow_skipped_while_spoofing(tmp_path):
    h = build_map_harness(str(tmp_path), home=Coordinate(22.3, 114.2))
    h.vm.handle_map_tap(Coordinate(7, 7))
    h.vm.toggle_spoofing()

    h.vm.request_location_permission()
    h.timers.advance(2000)

    assert "stop" not in h.service.calls
    assert h.vm.map_region.center == Coordinate(7, 7)


def test_bookmark_creator_prefills_selection_or_center(tmp_path):
    h = build_map_harness(str(tmp_path))

    h.vm.open_bookmark_creator()
    assert h.vm.editor_mode is None
    assert h.vm.error_message == NO_SELECTION_FOR_BOOKMARK
    h.vm.dismiss_error()

    h.vm.update_map_center(Coordinate(8, 8))
    h.vm.open_bookmark_creator()
    assert h.vm.editor_mode.kind is EditorKind.CREATE
    assert h.vm.editor_mode.point == LocationPoint(Coordinate(8, 8))

    h.vm.handle_map_tap(Coordinate(9, 9))
    h.vm.open_bookmark_creator()
    assert h.vm.editor_mode.point == LocationPoint(Coordinate(9, 9))

    h.vm.complete_editor_flow()
    assert h.vm.editor_mode is None


def test_state_changes_reach_subscribers(tmp_path):
    h = build_map_harness(str(tmp_path))
    seen = []
    h.vm.state.subscribe(lambda name, _old, _new: seen.append(name), names=("session",))

    h.vm.handle_map_tap(Coordinate(1, 1))
    h.vm.toggle_spoofing()
    h.vm.toggle_spoofing()

    assert seen == ["session", "session"]


def test_close_cancels_pending_timers(tmp_path):
    h = build_map_harness(str(tmp_path))
    h.vm.request_location_permission()
    h.vm.center_on_real_location()

    h.vm.close()
    h.timers.advance_s(10)

    assert h.vm.show_error_alert is False
