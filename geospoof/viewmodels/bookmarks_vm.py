"""Bookmark list view model.

Call context:
    ``AppController`` builds this after ``MapVM`` and passes the map view
    model in as a non-owning reference: the ``MapVM`` must outlive every
    ``BookmarksVM`` bound to it. Activation is delegated to ``MapVM`` so the
    spoofing rules live in one place.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from ..domain.entities import Bookmark, Coordinate, EditorKind, EditorMode, LocationPoint
from ..domain.ports import BookmarkStorePort, UseCaseError
from ..usecases.import_legacy_bookmarks import ImportLegacyBookmarks
from ..utils.observable import ObservableState, StateField, Subscription
from .map_vm import MapVM
from .settings_vm import LocSimSettings

log = logging.getLogger(__name__)

IMPORT_SUCCESS_TEMPLATE = "成功导入 %d 条收藏。"
IMPORT_NOTHING_FOUND = "没有发现可导入的收藏。"
EMPTY_NAME_MESSAGE = "请输入收藏名称"
BOOKMARK_GONE_MESSAGE = "该收藏已被删除"


class BookmarksVM:
    """List-screen behaviour over the bookmark store."""

    editor_mode = StateField()
    show_import_prompt = StateField()
    import_result_message = StateField()
    show_import_result = StateField()
    error_message = StateField()
    show_error_alert = StateField()

    def __init__(
        self,
        *,
        store: BookmarkStorePort,
        map_vm: MapVM,
        settings: LocSimSettings,
        uc_import_legacy: Optional[ImportLegacyBookmarks] = None,
    ) -> None:
        self.store = store
        self.map_vm = map_vm
        self.settings = settings
        self.uc_import_legacy = uc_import_legacy or ImportLegacyBookmarks(store)
        self.state = ObservableState(
            editor_mode=None,
            show_import_prompt=False,
            import_result_message=None,
            show_import_result=False,
            error_message=None,
            show_error_alert=False,
        )
        self._map_editor_sub: Optional[Subscription] = map_vm.state.subscribe(
            self._on_map_editor_requested, names=("editor_mode",)
        )
        self.evaluate_legacy_state()

    # ---- List data ----
    @property
    def bookmarks(self) -> List[Bookmark]:
        return self.store.bookmarks

    @property
    def last_used_bookmark_id(self) -> Optional[str]:
        return self.store.last_used_bookmark_id

    def is_active(self, bookmark: Bookmark) -> bool:
        return self.store.last_used_bookmark_id == bookmark.id and self.map_vm.is_spoofing_active

    # ---- Legacy import ----
    def evaluate_legacy_state(self) -> None:
        self.state.set("show_import_prompt", bool(self.store.can_import_legacy_records))

    def perform_legacy_import(self) -> None:
        try:
            imported = self.uc_import_legacy()
        except UseCaseError as err:
            message = err.message
        else:
            message = IMPORT_SUCCESS_TEMPLATE % imported if imported > 0 else IMPORT_NOTHING_FOUND
        self.state.update(
            import_result_message=message,
            show_import_result=True,
            show_import_prompt=False,
        )

    def dismiss_import_result(self) -> None:
        self.state.update(show_import_result=False, import_result_message=None)

    # ---- Selection ----
    def select(self, bookmark: Bookmark) -> None:
        """Toggle: stop if this bookmark is the running one, else focus and start it."""
        if self.is_active(bookmark):
            self.map_vm.stop_spoofing()
        else:
            # Bookmark taps always start, regardless of auto_start_from_bookmarks.
            self.map_vm.focus(bookmark, auto_start_override=True)

    # ---- CRUD ----
    def delete_bookmarks(self, indices: Sequence[int]) -> None:
        self.store.delete_bookmarks(indices)

    def delete(self, bookmark: Bookmark) -> None:
        for idx, existing in enumerate(self.store.bookmarks):
            if existing.id == bookmark.id:
                self.store.delete_bookmarks([idx])
                return

    def move_bookmarks(self, indices: Sequence[int], destination: int) -> None:
        self.store.move_bookmarks(indices, destination)

    def add_bookmark(self, point: Optional[LocationPoint] = None) -> None:
        self.state.set("editor_mode", EditorMode.create(point))

    def edit(self, bookmark: Bookmark) -> None:
        self.state.set("editor_mode", EditorMode.edit(bookmark))

    def dismiss_editor(self) -> None:
        self.state.set("editor_mode", None)

    def save_bookmark(self, name: str, coordinate: Coordinate, note: Optional[str]) -> None:
        """Commit the open editor.

        A blank name keeps the editor open with an error; a record deleted
        while it was being edited closes the editor with an error.
        """
        mode: Optional[EditorMode] = self.editor_mode
        if mode is None:
            return
        try:
            if mode.kind is EditorKind.CREATE:
                self.store.add_bookmark(name, coordinate, note)
            else:
                updated = mode.bookmark.with_changes(name=name, coordinate=coordinate, note=note)
                self.store.update_bookmark(updated)
        except ValueError:
            self._show_error(EMPTY_NAME_MESSAGE)
            return
        except KeyError:
            log.warning("Bookmark %s vanished while being edited", mode.bookmark.id)
            self.state.set("editor_mode", None)
            self._show_error(BOOKMARK_GONE_MESSAGE)
            return
        self.state.set("editor_mode", None)

    def dismiss_error(self) -> None:
        self.state.update(show_error_alert=False, error_message=None)

    def _show_error(self, message: str) -> None:
        self.state.update(error_message=message, show_error_alert=True)

    # ---- Map editor requests ----
    def _on_map_editor_requested(self, _name: str, _old: Any, new: Any) -> None:
        if new is None:
            return
        self.map_vm.complete_editor_flow()
        self.state.set("editor_mode", new)

    def close(self) -> None:
        if self._map_editor_sub is not None:
            self._map_editor_sub.cancel()
            self._map_editor_sub = None


__all__ = [
    "BOOKMARK_GONE_MESSAGE",
    "BookmarksVM",
    "EMPTY_NAME_MESSAGE",
    "IMPORT_NOTHING_FOUND",
    "IMPORT_SUCCESS_TEMPLATE",
]
