# geospoof/app/main.py
from __future__ import annotations

import argparse
import logging
import os
import queue
from tkinter import messagebox, simpledialog
from typing import Any, Callable, Optional

from ..domain.entities import Coordinate, EditorKind, EditorMode, LocationPoint
from ..utils import logging as logging_utils
from .controller import AppController
from .views.main_window import MainWindowView

logging_utils.configure_root()

DISPATCH_POLL_MS = 50


class App:
    """Bootstrap: wire the Tk view to MapVM / BookmarksVM state."""

    def __init__(self, *, root_dir: str, offline: bool = False) -> None:
        self._log = logging.getLogger(__name__)
        self._pending: "queue.Queue[Callable[[], None]]" = queue.Queue()

        self.win = MainWindowView(
            on_search_changed=self._on_search_changed,
            on_search_submit=self._on_search_submit,
            on_clear_search=self._on_clear_search,
            on_pick_result=self._on_pick_result,
            on_select_coordinate=self._on_select_coordinate,
            on_toggle_spoofing=self._on_toggle_spoofing,
            on_center_real=self._on_center_real,
            on_add_bookmark=self._on_add_bookmark,
            on_activate_bookmark=self._on_activate_bookmark,
            on_delete_bookmark=self._on_delete_bookmark,
            on_edit_bookmark=self._on_edit_bookmark,
            on_move_bookmark=self._on_move_bookmark,
            on_import_legacy=self._on_import_legacy,
        )
        self.ctx = AppController(
            root_dir=root_dir,
            schedule=self.win.after,
            cancel=self.win.after_cancel,
            dispatch=self._pending.put,
            offline=offline,
        )
        self.map_vm = self.ctx.map_vm
        self.bookmarks_vm = self.ctx.bookmarks_vm
        self._log.info("Using offline location service and simulator backends")

        self.map_vm.state.subscribe(self._on_map_state)
        self.bookmarks_vm.state.subscribe(self._on_bookmarks_state)
        self.ctx.bookmark_store.changed.subscribe(lambda _rows: self._render_bookmarks())

        self.win.protocol("WM_DELETE_WINDOW", self._on_close)
        self.win.after(DISPATCH_POLL_MS, self._drain_dispatch)

        self._render_all()
        self.map_vm.request_location_permission()

    def run(self) -> None:
        self.win.mainloop()

    # ------------------------------------------------------------------
    # Worker -> UI thread
    # ------------------------------------------------------------------
    def _drain_dispatch(self) -> None:
        try:
            while True:
                try:
                    fn = self._pending.get_nowait()
                except queue.Empty:
                    break
                try:
                    fn()
                except Exception:
                    self._log.exception("Dispatched UI callback failed")
        finally:
            self.win.after(DISPATCH_POLL_MS, self._drain_dispatch)

    # ------------------------------------------------------------------
    # View callbacks
    # ------------------------------------------------------------------
    def _on_search_changed(self, text: str) -> None:
        if text != self.map_vm.search_text:
            self.map_vm.set_search_text(text)

    def _on_search_submit(self, text: str) -> None:
        self.map_vm.set_search_text(text, search=True)

    def _on_clear_search(self) -> None:
        self.map_vm.clear_search()

    def _on_pick_result(self, index: int) -> None:
        results = self.map_vm.search_results
        if 0 <= index < len(results):
            self.map_vm.select_search_result(results[index])

    def _on_select_coordinate(self, lat: str, lon: str) -> None:
        try:
            coordinate = Coordinate(float(lat), float(lon))
        except (TypeError, ValueError) as exc:
            messagebox.showerror("geospoof", f"Invalid coordinate: {exc}", parent=self.win)
            return
        self.map_vm.handle_map_tap(coordinate)

    def _on_toggle_spoofing(self) -> None:
        self.map_vm.toggle_spoofing()
        self._render_bookmarks()

    def _on_center_real(self) -> None:
        self.map_vm.center_on_real_location()

    def _on_add_bookmark(self) -> None:
        self.map_vm.open_bookmark_creator()

    def _on_activate_bookmark(self, index: int) -> None:
        bookmarks = self.bookmarks_vm.bookmarks
        if 0 <= index < len(bookmarks):
            self.bookmarks_vm.select(bookmarks[index])
            self._render_bookmarks()

    def _on_delete_bookmark(self, index: int) -> None:
        self.bookmarks_vm.delete_bookmarks([index])

    def _on_edit_bookmark(self, index: int) -> None:
        bookmarks = self.bookmarks_vm.bookmarks
        if 0 <= index < len(bookmarks):
            self.bookmarks_vm.edit(bookmarks[index])

    def _on_move_bookmark(self, index: int, delta: int) -> None:
        # Destinations are pre-move offsets, so moving down skips past the neighbour.
        destination = index + delta if delta < 0 else index + delta + 1
        self.bookmarks_vm.move_bookmarks([index], destination)

    def _on_import_legacy(self) -> None:
        self.bookmarks_vm.perform_legacy_import()

    def _on_close(self) -> None:
        self.ctx.shutdown()
        self.win.destroy()

    # ------------------------------------------------------------------
    # State -> view
    # ------------------------------------------------------------------
    def _on_map_state(self, name: str, _old: Any, new: Any) -> None:
        if name == "show_error_alert" and new:
            messagebox.showerror("geospoof", self.map_vm.error_message or "", parent=self.win)
            self.map_vm.dismiss_error()
        self._render_all()

    def _on_bookmarks_state(self, name: str, _old: Any, new: Any) -> None:
        if name == "show_import_result" and new:
            messagebox.showinfo("geospoof", self.bookmarks_vm.import_result_message or "", parent=self.win)
            self.bookmarks_vm.dismiss_import_result()
        elif name == "show_error_alert" and new:
            messagebox.showerror("geospoof", self.bookmarks_vm.error_message or "", parent=self.win)
            self.bookmarks_vm.dismiss_error()
        elif name == "editor_mode" and new is not None:
            # Let the triggering state change finish before opening a modal dialog.
            self.win.after_idle(self._run_bookmark_editor)
        self.win.render_import_prompt(self.bookmarks_vm.show_import_prompt)

    def _run_bookmark_editor(self) -> None:
        mode: Optional[EditorMode] = self.bookmarks_vm.editor_mode
        if mode is None:
            return
        if mode.kind is EditorKind.EDIT:
            title, initial = "Rename Bookmark", mode.bookmark.name
            coordinate, note = mode.bookmark.coordinate, mode.bookmark.note
        else:
            point = mode.point or LocationPoint(coordinate=self.map_vm.map_region.center)
            title, initial = "Add Bookmark", point.label or ""
            coordinate, note = point.coordinate, point.note
        name: Optional[str] = simpledialog.askstring(title, "Name", initialvalue=initial, parent=self.win)
        if name is None:
            self.bookmarks_vm.dismiss_editor()
            return
        self.bookmarks_vm.save_bookmark(name, coordinate, note)
        if self.bookmarks_vm.editor_mode is not None:
            self.win.after_idle(self._run_bookmark_editor)

    def _render_all(self) -> None:
        vm = self.map_vm
        status = vm.status_info
        self.win.render_status(status.title, status.detail, vm.primary_button_title, vm.primary_button_disabled)
        selected = vm.selected_location
        center = vm.map_region.center
        parts = [f"Map centre: {center.describe()}"]
        if selected is not None:
            parts.append(f"Selected: {selected.label or selected.coordinate_description}")
        self.win.render_center("   ".join(parts))
        self.win.render_search(
            vm.search_text,
            [result.title for result in vm.search_results],
            vm.show_search_results,
            vm.is_searching,
        )
        self.win.render_import_prompt(self.bookmarks_vm.show_import_prompt)
        self._render_bookmarks()

    def _render_bookmarks(self) -> None:
        rows = []
        for bookmark in self.bookmarks_vm.bookmarks:
            marker = "● " if self.bookmarks_vm.is_active(bookmark) else "  "
            rows.append(f"{marker}{bookmark.name}  ({bookmark.coordinate.describe()})")
        self.win.render_bookmarks(rows)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog="geospoof", description="Location spoofing companion")
    parser.add_argument(
        "--data-dir",
        default=os.path.join(os.path.expanduser("~"), ".geospoof"),
        help="directory for settings and bookmarks",
    )
    parser.add_argument("--offline", action="store_true", help="use canned search results")
    args = parser.parse_args(argv)
    os.makedirs(args.data_dir, exist_ok=True)
    App(root_dir=args.data_dir, offline=args.offline).run()


if __name__ == "__main__":
    main()
