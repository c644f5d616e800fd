from __future__ import annotations

from datetime import timedelta

from geospoof.domain.entities import Coordinate
from geospoof.domain.errors import SpoofErrorKind
from geospoof.tests.unit.helpers import build_map_harness


def _centred_harness(tmp_path):
    h = build_map_harness(str(tmp_path))
    h.service.emit_fix(Coordinate(1, 1), h.timers.clock())
    assert h.vm.map_region.center == Coordinate(1, 1)
    return h


def test_fresh_fix_centres_immediately(tmp_path):
    h = _centred_harness(tmp_path)

    h.vm.center_on_real_location()
    h.timers.advance(100)
    h.service.emit_fix(Coordinate(2, 2), h.timers.clock())

    assert h.vm.map_region.center == Coordinate(2, 2)
    assert not h.scheduler.pending("center_check")

    h.timers.advance_s(6)
    assert h.vm.show_error_alert is False


def test_fix_within_tolerance_counts_as_fresh(tmp_path):
    h = _centred_harness(tmp_path)
    h.timers.advance(5000)

    h.vm.center_on_real_location()
    h.service.emit_fix(Coordinate(2, 2), h.timers.clock() - timedelta(milliseconds=500))

    assert h.vm.map_region.center == Coordinate(2, 2)


def test_stale_fix_is_ignored_without_error(tmp_path):
    h = _centred_harness(tmp_path)
    h.timers.advance(10_000)

    h.vm.center_on_real_location()
    h.service.emit_fix(Coordinate(3, 3), h.timers.clock() - timedelta(seconds=5))
    h.timers.advance_s(1)
    assert h.scheduler.pending("center_grace")
    h.timers.advance_s(4)

    assert h.vm.map_region.center == Coordinate(1, 1)
    assert h.vm.show_error_alert is False
    assert not h.scheduler.pending("center_grace")


def test_fresh_fix_during_grace_period_centres(tmp_path):
    h = _centred_harness(tmp_path)

    h.vm.center_on_real_location()
    h.timers.advance_s(2.5)
    h.service.emit_fix(Coordinate(4, 4), h.timers.clock())

    assert h.vm.map_region.center == Coordinate(4, 4)
    assert not h.scheduler.pending("center_grace")


def test_no_fix_within_five_seconds_reports_unavailable(tmp_path):
    h = build_map_harness(str(tmp_path))

    h.vm.center_on_real_location()
    h.timers.advance_s(4.9)
    assert h.vm.show_error_alert is False
    h.timers.advance_s(0.1)

    assert h.vm.show_error_alert is True
    assert h.vm.error_message == SpoofErrorKind.LOCATION_UNAVAILABLE.message


def test_repeated_request_restarts_wait(tmp_path):
    h = build_map_harness(str(tmp_path))

    h.vm.center_on_real_location()
    h.timers.advance_s(3)
    h.vm.center_on_real_location()
    h.timers.advance_s(3)

    assert h.vm.show_error_alert is False
    h.timers.advance_s(2)
    assert h.vm.show_error_alert is True
