from __future__ import annotations

import json

from geospoof.adapters.bookmark_store_local import LEGACY_FILE
from geospoof.domain.entities import Coordinate, EditorKind, LocationPoint
from geospoof.tests.unit.helpers import build_map_harness
from geospoof.viewmodels.bookmarks_vm import (
    BOOKMARK_GONE_MESSAGE,
    EMPTY_NAME_MESSAGE,
    IMPORT_NOTHING_FOUND,
    BookmarksVM,
)
from geospoof.viewmodels.settings_vm import LocSimSettings


def _make(tmp_path, settings=None):
    settings = settings or LocSimSettings()
    h = build_map_harness(str(tmp_path), settings=settings)
    vm = BookmarksVM(store=h.store, map_vm=h.vm, settings=settings)
    return h, vm


def test_select_starts_even_when_auto_start_disabled(tmp_path):
    h, vm = _make(tmp_path)
    home = h.store.add_bookmark("Home", Coordinate(5, 5))

    vm.select(home)

    assert h.simulator.current == (5.0, 5.0)
    assert vm.is_active(home)
    assert vm.last_used_bookmark_id == home.id
    assert h.vm.status_info.detail == "Home"


def test_select_active_bookmark_stops(tmp_path):
    h, vm = _make(tmp_path)
    home = h.store.add_bookmark("Home", Coordinate(5, 5))
    vm.select(home)

    vm.select(home)

    assert not h.vm.is_spoofing_active
    assert not vm.is_active(home)
    assert vm.last_used_bookmark_id is None


def test_select_other_bookmark_switches(tmp_path):
    h, vm = _make(tmp_path)
    home = h.store.add_bookmark("Home", Coordinate(5, 5))
    work = h.store.add_bookmark("Work", Coordinate(6, 6))
    vm.select(home)

    vm.select(work)

    assert h.simulator.current == (6.0, 6.0)
    assert vm.is_active(work)
    assert not vm.is_active(home)


def test_save_creates_then_edits(tmp_path):
    _h, vm = _make(tmp_path)

    vm.save_bookmark("ignored", Coordinate(0, 0), None)
    assert vm.bookmarks == []

    vm.add_bookmark()
    assert vm.editor_mode.kind is EditorKind.CREATE
    vm.save_bookmark("Cafe", Coordinate(1, 2), "corner")
    assert vm.editor_mode is None
    cafe = vm.bookmarks[0]
    assert (cafe.name, cafe.note) == ("Cafe", "corner")

    vm.edit(cafe)
    assert vm.editor_mode.bookmark == cafe
    vm.save_bookmark("Cafe 2", Coordinate(3, 4), None)

    assert len(vm.bookmarks) == 1
    assert vm.bookmarks[0].id == cafe.id
    assert vm.bookmarks[0].name == "Cafe 2"
    assert vm.bookmarks[0].coordinate == Coordinate(3, 4)


def test_dismiss_editor(tmp_path):
    _h, vm = _make(tmp_path)
    vm.add_bookmark()
    vm.dismiss_editor()
    assert vm.editor_mode is None


def test_delete_and_move_delegate_to_store(tmp_path):
    h, vm = _make(tmp_path)
    a = h.store.add_bookmark("A", Coordinate(1, 1))
    h.store.add_bookmark("B", Coordinate(2, 2))
    h.store.add_bookmark("C", Coordinate(3, 3))

    vm.move_bookmarks([0], 3)
    assert [b.name for b in vm.bookmarks] == ["B", "C", "A"]

    vm.delete(a)
    vm.delete_bookmarks([0])
    assert [b.name for b in vm.bookmarks] == ["C"]


def test_deleting_active_bookmark_clears_marker(tmp_path):
    h, vm = _make(tmp_path)
    home = h.store.add_bookmark("Home", Coordinate(5, 5))
    vm.select(home)

    vm.delete(home)

    assert vm.last_used_bookmark_id is None
    assert h.vm.is_spoofing_active


def test_import_prompt_and_success_message(tmp_path):
    rows = [{"name": "Old", "lat": 1, "long": 2}, {"name": "Older", "lat": 3, "long": 4}]
    (tmp_path / LEGACY_FILE).write_text(json.dumps(rows), encoding="utf-8")
    _h, vm = _make(tmp_path)
    assert vm.show_import_prompt is True

    vm.perform_legacy_import()

    assert vm.import_result_message == "成功导入 2 条收藏。"
    assert vm.show_import_result is True
    assert vm.show_import_prompt is False
    assert [b.name for b in vm.bookmarks] == ["Old", "Older"]

    vm.dismiss_import_result()
    assert vm.show_import_result is False
    vm.evaluate_legacy_state()
    assert vm.show_import_prompt is False


def test_import_with_nothing_found(tmp_path):
    (tmp_path / LEGACY_FILE).write_text("[]", encoding="utf-8")
    _h, vm = _make(tmp_path)

    vm.perform_legacy_import()

    assert vm.import_result_message == IMPORT_NOTHING_FOUND


def test_import_failure_message(tmp_path):
    (tmp_path / LEGACY_FILE).write_text("{broken", encoding="utf-8")
    _h, vm = _make(tmp_path)

    vm.perform_legacy_import()

    assert vm.import_result_message == "导入失败，请重试。"
    assert vm.show_import_result is True


def test_blank_name_keeps_editor_open_with_error(tmp_path):
    _h, vm = _make(tmp_path)
    vm.add_bookmark()

    vm.save_bookmark("   ", Coordinate(1, 2), None)

    assert vm.bookmarks == []
    assert vm.editor_mode.kind is EditorKind.CREATE
    assert vm.error_message == EMPTY_NAME_MESSAGE
    assert vm.show_error_alert is True

    vm.dismiss_error()
    vm.save_bookmark("Cafe", Coordinate(1, 2), None)
    assert vm.error_message is None
    assert vm.editor_mode is None
    assert [b.name for b in vm.bookmarks] == ["Cafe"]


def test_editing_deleted_bookmark_closes_editor_with_error(tmp_path):
    h, vm = _make(tmp_path)
    cafe = h.store.add_bookmark("Cafe", Coordinate(1, 2))
    vm.edit(cafe)
    h.store.delete_bookmarks([0])

    vm.save_bookmark("Cafe 2", Coordinate(1, 2), None)

    assert vm.editor_mode is None
    assert vm.error_message == BOOKMARK_GONE_MESSAGE
    assert vm.show_error_alert is True
    assert vm.bookmarks == []


def test_map_creator_request_opens_list_editor(tmp_path):
    h, vm = _make(tmp_path)
    h.vm.handle_map_tap(Coordinate(9, 9))

    h.vm.open_bookmark_creator()

    assert h.vm.editor_mode is None
    assert vm.editor_mode.kind is EditorKind.CREATE
    assert vm.editor_mode.point == LocationPoint(Coordinate(9, 9))

    vm.save_bookmark("Tapped", vm.editor_mode.point.coordinate, None)
    assert [(b.name, b.coordinate) for b in vm.bookmarks] == [("Tapped", Coordinate(9, 9))]


def test_closed_vm_ignores_map_creator(tmp_path):
    h, vm = _make(tmp_path)
    h.vm.update_map_center(Coordinate(8, 8))
    vm.close()

    h.vm.open_bookmark_creator()

    assert vm.editor_mode is None
    assert h.vm.editor_mode.point == LocationPoint(Coordinate(8, 8))


def test_add_bookmark_with_point_prefills_editor(tmp_path):
    _h, vm = _make(tmp_path)
    point = LocationPoint(Coordinate(3, 4))

    vm.add_bookmark(point)

    assert vm.editor_mode.point == point
