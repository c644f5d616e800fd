from __future__ import annotations

import threading
from typing import List, Optional, Protocol, Sequence

from .entities import AuthorizationStatus, Bookmark, Coordinate, LocationFix, SearchResult


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Cancellation ----
class CancelToken:
    """Cooperative cancellation flag handed to long-running port calls.

    Callers check ``cancelled`` before committing results; adapters may check it
    between network attempts.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# ---- Ports (Hexagonal boundaries) ----
class LocationDelegate(Protocol):
    """Callbacks the location service invokes on the UI thread."""

    def on_authorization_changed(self, status: AuthorizationStatus) -> None: ...
    def on_locations(self, fixes: Sequence[LocationFix]) -> None: ...
    def on_error(self, error: Exception) -> None: ...


class LocationServicePort(Protocol):
    """OS location permission and update API."""

    def set_delegate(self, delegate: Optional[LocationDelegate]) -> None: ...
    def request_when_in_use_authorization(self) -> None: ...
    def request_always_authorization(self) -> None: ...
    def start_updating_location(self) -> None: ...
    def stop_updating_location(self) -> None: ...
    def request_location(self) -> None: ...  # single on-demand fix


class LocationSimulatorPort(Protocol):
    """Device location-simulation backend."""

    def set(self, latitude: float, longitude: float) -> None: ...
    def clear(self) -> None: ...
    def notify_timezone_update(self) -> None: ...


class GeocodingPort(Protocol):
    """Natural-language place search."""

    def search(
        self, query: str, *, limit: int = 10, cancel_token: Optional[CancelToken] = None
    ) -> List[SearchResult]: ...


class BookmarkStorePort(Protocol):
    """Persistence for named coordinates and the last-used marker."""

    @property
    def bookmarks(self) -> List[Bookmark]: ...
    @property
    def last_used_bookmark_id(self) -> Optional[str]: ...
    @property
    def can_import_legacy_records(self) -> bool: ...

    def add_bookmark(self, name: str, coordinate: Coordinate, note: Optional[str] = None) -> Bookmark: ...
    def update_bookmark(self, bookmark: Bookmark) -> None: ...
    def delete_bookmarks(self, indices: Sequence[int]) -> None: ...
    def move_bookmarks(self, indices: Sequence[int], destination: int) -> None: ...
    def mark_as_last_used(self, bookmark: Optional[Bookmark]) -> None: ...
    def import_legacy_bookmarks(self) -> int: ...


class StoragePort(Protocol):
    """Persistence for user settings."""

    def save_user_settings(self, payload: dict) -> None: ...
    def load_user_settings(self) -> Optional[dict]: ...
