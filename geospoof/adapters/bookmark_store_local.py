"""JSON-backed bookmark store.

File layout under ``root_dir``:
    ``bookmarks.json``         current records, order, and last-used marker
    ``legacy_bookmarks.json``  old export (``[{"name", "lat", "long"}, ...]``)
                               imported once on request

Call context:
    ``AppController`` creates one store; ``MapVM`` and ``BookmarksVM`` share
    it. Views subscribe to ``changed`` to refresh the list.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from geospoof.adapters.storage_local import read_json, write_json_atomic
from geospoof.domain.entities import Bookmark, Coordinate
from geospoof.domain.ports import BookmarkStorePort
from geospoof.utils.observable import Signal

BOOKMARKS_FILE = "bookmarks.json"
LEGACY_FILE = "legacy_bookmarks.json"
FORMAT_VERSION = 1

log = logging.getLogger(__name__)


class BookmarkStoreLocal(BookmarkStorePort):
    """Keeps bookmarks in memory and persists every mutation."""

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir
        self.changed = Signal("bookmarks")
        self._bookmarks: List[Bookmark] = []
        self._last_used_id: Optional[str] = None
        self._legacy_imported = False
        self._load()

    # ---- Read side ----
    @property
    def bookmarks(self) -> List[Bookmark]:
        return list(self._bookmarks)

    @property
    def last_used_bookmark_id(self) -> Optional[str]:
        return self._last_used_id

    @property
    def can_import_legacy_records(self) -> bool:
        return not self._legacy_imported and os.path.exists(self._legacy_path)

    def find(self, bookmark_id: str) -> Optional[Bookmark]:
        for bookmark in self._bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def index_of(self, bookmark: Bookmark) -> Optional[int]:
        for idx, existing in enumerate(self._bookmarks):
            if existing.id == bookmark.id:
                return idx
        return None

    # ---- Mutations ----
    def add_bookmark(self, name: str, coordinate: Coordinate, note: Optional[str] = None) -> Bookmark:
        bookmark = Bookmark(name=_clean_name(name), coordinate=coordinate, note=_clean_note(note))
        self._bookmarks.append(bookmark)
        self._commit()
        return bookmark

    def update_bookmark(self, bookmark: Bookmark) -> None:
        idx = self.index_of(bookmark)
        if idx is None:
            raise KeyError(f"Unknown bookmark id '{bookmark.id}'")
        self._bookmarks[idx] = bookmark.with_changes(
            name=_clean_name(bookmark.name), note=_clean_note(bookmark.note)
        )
        self._commit()

    def delete_bookmarks(self, indices: Sequence[int]) -> None:
        doomed = {int(i) for i in indices if 0 <= int(i) < len(self._bookmarks)}
        if not doomed:
            return
        removed_ids = {self._bookmarks[i].id for i in doomed}
        self._bookmarks = [b for i, b in enumerate(self._bookmarks) if i not in doomed]
        if self._last_used_id in removed_ids:
            self._last_used_id = None
        self._commit()

    def move_bookmarks(self, indices: Sequence[int], destination: int) -> None:
        """Move the rows at ``indices`` so they sit before ``destination``.

        ``destination`` is an offset in the list as it was before the move,
        matching list-view drag-and-drop semantics.
        """
        picked = sorted({int(i) for i in indices if 0 <= int(i) < len(self._bookmarks)})
        if not picked:
            return
        destination = max(0, min(int(destination), len(self._bookmarks)))
        moving = [self._bookmarks[i] for i in picked]
        remaining = [b for i, b in enumerate(self._bookmarks) if i not in set(picked)]
        insert_at = destination - sum(1 for i in picked if i < destination)
        reordered = remaining[:insert_at] + moving + remaining[insert_at:]
        if reordered == self._bookmarks:
            return
        self._bookmarks = reordered
        self._commit()

    def mark_as_last_used(self, bookmark: Optional[Bookmark]) -> None:
        new_id = bookmark.id if bookmark is not None else None
        if new_id == self._last_used_id:
            return
        self._last_used_id = new_id
        self._commit()

    def import_legacy_bookmarks(self) -> int:
        """Import the legacy export once; return the number of records added.

        Raises:
            OSError / ValueError: If the legacy file cannot be read or parsed.
        """
        payload = read_json(self._legacy_path)
        if payload is None:
            rows: List[Any] = []
        elif isinstance(payload, list):
            rows = payload
        else:
            raise ValueError(f"{self._legacy_path} must contain a JSON list.")

        imported = 0
        for row in rows:
            bookmark = _legacy_row_to_bookmark(row)
            if bookmark is None:
                log.warning("Skipping malformed legacy bookmark: %r", row)
                continue
            self._bookmarks.append(bookmark)
            imported += 1
        self._legacy_imported = True
        self._commit()
        log.info("Imported %d legacy bookmarks", imported)
        return imported

    # ---- Persistence ----
    @property
    def _path(self) -> str:
        return os.path.join(self.root, BOOKMARKS_FILE)

    @property
    def _legacy_path(self) -> str:
        return os.path.join(self.root, LEGACY_FILE)

    def _load(self) -> None:
        """Read ``bookmarks.json``; an unusable file is moved aside, not overwritten."""
        try:
            data = read_json(self._path)
            if data is None:
                return
            if not isinstance(data, dict):
                raise ValueError(f"{self._path} must contain a JSON object.")
            bookmarks = [_bookmark_from_dict(item) for item in data.get("bookmarks") or []]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            self._quarantine(exc)
            return
        self._bookmarks = bookmarks
        last_used = data.get("last_used_id")
        self._last_used_id = last_used if self.find(str(last_used or "")) else None
        self._legacy_imported = bool(data.get("legacy_imported", False))

    def _quarantine(self, exc: Exception) -> None:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup = f"{self._path}.corrupt-{stamp}"
        try:
            os.replace(self._path, backup)
        except OSError as move_exc:
            log.error("Unreadable bookmarks file %s (%s); could not move it aside: %s", self._path, exc, move_exc)
            return
        log.error("Unreadable bookmarks file %s (%s); moved to %s", self._path, exc, backup)

    def _commit(self) -> None:
        write_json_atomic(self._path, self._to_dict())
        self.changed.emit(self.bookmarks)

    def _to_dict(self) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "last_used_id": self._last_used_id,
            "legacy_imported": self._legacy_imported,
            "bookmarks": [_bookmark_to_dict(b) for b in self._bookmarks],
        }


def _clean_name(name: str) -> str:
    text = str(name or "").strip()
    if not text:
        raise ValueError("Bookmark name must not be empty.")
    return text


def _clean_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    text = str(note).strip()
    return text or None


def _bookmark_to_dict(bookmark: Bookmark) -> Dict[str, Any]:
    return {
        "id": bookmark.id,
        "name": bookmark.name,
        "latitude": bookmark.coordinate.latitude,
        "longitude": bookmark.coordinate.longitude,
        "note": bookmark.note,
    }


def _bookmark_from_dict(item: Dict[str, Any]) -> Bookmark:
    return Bookmark(
        id=str(item["id"]),
        name=str(item["name"]),
        coordinate=Coordinate(float(item["latitude"]), float(item["longitude"])),
        note=item.get("note"),
    )


def _legacy_row_to_bookmark(row: Any) -> Optional[Bookmark]:
    if not isinstance(row, dict):
        return None
    try:
        name = _clean_name(row.get("name"))
        coordinate = Coordinate(float(row["lat"]), float(row["long"]))
    except (KeyError, TypeError, ValueError):
        return None
    return Bookmark(name=name, coordinate=coordinate)


__all__ = ["BOOKMARKS_FILE", "BookmarkStoreLocal", "LEGACY_FILE"]
