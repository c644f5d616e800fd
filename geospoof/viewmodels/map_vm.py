"""Map screen view model: selection, search, centring, and spoofing commands.

Call context:
    ``AppController`` builds one ``MapVM`` and hands it to the map view and to
    ``BookmarksVM``. All methods run on the UI thread. Search work runs on
    ``executor`` and is marshalled back with ``dispatch``; delays go through
    the shared ``DelayScheduler``.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence, Tuple

from ..domain.entities import (
    Bookmark,
    Coordinate,
    EditorMode,
    LocationFix,
    LocationPoint,
    MapRegion,
    MapStatus,
    SearchResult,
    Session,
)
from ..domain.errors import NO_SELECTION_FOR_BOOKMARK, SpoofErrorKind
from ..domain.ports import BookmarkStorePort, CancelToken, UseCaseError
from ..domain.timing import is_fresh_fix, to_ms
from ..usecases.search_places import SearchPlaces
from ..usecases.spoofing_engine import SpoofingEngine
from ..utils.delay_scheduler import DelayScheduler
from ..utils.observable import ObservableState, StateField, Subscription
from .location_authorizer import LocationAuthorizer
from .settings_vm import LocSimSettings
from .status_format import map_status, primary_button_title

log = logging.getLogger(__name__)

DEFAULT_CENTER = Coordinate(39.9042, 116.4074)

PERMISSION_REFRESH_CHANNEL = "permission_refresh"
PERMISSION_CENTER_CHANNEL = "permission_center"
CENTER_CHECK_CHANNEL = "center_check"
CENTER_GRACE_CHANNEL = "center_grace"

ANIMATION_SPRING = "spring"
ANIMATION_DEFAULT = "default"

Clock = Callable[[], datetime]
Dispatch = Callable[[Callable[[], None]], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class MapVM:
    """Composes location, spoofing engine, and bookmark store into map behaviour."""

    selected_location = StateField()
    map_region = StateField()
    map_animation = StateField()
    editor_mode = StateField()
    error_message = StateField()
    show_error_alert = StateField()
    last_map_center = StateField()
    search_text = StateField()
    search_results = StateField()
    is_searching = StateField()
    show_search_results = StateField()
    session = StateField()

    def __init__(
        self,
        *,
        engine: SpoofingEngine,
        settings: LocSimSettings,
        bookmark_store: BookmarkStorePort,
        authorizer: LocationAuthorizer,
        scheduler: DelayScheduler,
        uc_search: SearchPlaces,
        executor: Executor,
        dispatch: Optional[Dispatch] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.engine = engine
        self.settings = settings
        self.bookmark_store = bookmark_store
        self.authorizer = authorizer
        self.scheduler = scheduler
        self.uc_search = uc_search
        self.executor = executor
        self._dispatch = dispatch or _call_now
        self._clock = clock or _utc_now

        span = settings.map_span_degrees
        self.state = ObservableState(
            selected_location=None,
            map_region=MapRegion(center=DEFAULT_CENTER, latitude_delta=span, longitude_delta=span),
            map_animation=ANIMATION_DEFAULT,
            editor_mode=None,
            error_message=None,
            show_error_alert=False,
            last_map_center=None,
            search_text="",
            search_results=(),
            is_searching=False,
            show_search_results=False,
            session=engine.session,
        )

        self._has_centered_on_user = False
        self._search_token: Optional[CancelToken] = None
        self._real_location_sub: Optional[Subscription] = None
        self._subscriptions = [
            engine.session_changed.subscribe(self._on_session_changed),
            authorizer.state.subscribe(self._on_fix_changed, names=("current_fix",)),
        ]

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def status_info(self) -> MapStatus:
        return map_status(self.engine.session)

    @property
    def primary_button_title(self) -> str:
        return primary_button_title(self.engine.session)

    @property
    def primary_button_disabled(self) -> bool:
        if self.engine.session.is_active:
            return False
        return self.selected_location is None

    @property
    def active_location(self) -> Optional[LocationPoint]:
        return self.engine.session.active_point

    @property
    def is_spoofing_active(self) -> bool:
        return self.engine.session.is_active

    @property
    def real_location(self) -> Optional[Coordinate]:
        return self.authorizer.current_coordinate

    @property
    def has_centered_on_user(self) -> bool:
        return self._has_centered_on_user

    # ------------------------------------------------------------------
    # Permission / map gestures
    # ------------------------------------------------------------------
    def request_location_permission(self) -> None:
        """Ask for "always" permission, then centre on the real location once."""
        self.authorizer.request_authorization(always=True)
        if self.is_spoofing_active:
            return
        timings = self.authorizer.timings
        self.scheduler.schedule(
            PERMISSION_REFRESH_CHANNEL, to_ms(timings.permission_settle_s), self._refresh_after_permission
        )

    def _refresh_after_permission(self) -> None:
        if self.is_spoofing_active:
            return
        self.authorizer.force_refresh()
        self.scheduler.schedule(
            PERMISSION_CENTER_CHANNEL,
            to_ms(self.authorizer.timings.fix_check_s),
            self._center_after_permission,
        )

    def _center_after_permission(self) -> None:
        coordinate = self.authorizer.current_coordinate
        if self.is_spoofing_active or coordinate is None:
            return
        self._has_centered_on_user = True
        self._center_map(coordinate)

    def handle_map_tap(self, coordinate: Coordinate) -> None:
        self.state.set("selected_location", LocationPoint(coordinate=coordinate))
        if self.settings.auto_center_on_selection:
            self._center_map(coordinate)

    def update_map_center(self, coordinate: Coordinate) -> None:
        self.state.set("last_map_center", coordinate)

    # ------------------------------------------------------------------
    # Bookmark editor
    # ------------------------------------------------------------------
    def open_bookmark_creator(self) -> None:
        if self.selected_location is not None:
            self.state.set("editor_mode", EditorMode.create(self.selected_location))
        elif self.last_map_center is not None:
            self.state.set("editor_mode", EditorMode.create(LocationPoint(coordinate=self.last_map_center)))
        else:
            self._show_error(NO_SELECTION_FOR_BOOKMARK)

    def complete_editor_flow(self) -> None:
        self.state.set("editor_mode", None)

    # ------------------------------------------------------------------
    # Spoofing
    # ------------------------------------------------------------------
    def toggle_spoofing(self) -> None:
        if self.engine.session.is_active:
            self.stop_spoofing()
        else:
            self.start_spoofing_selected()

    def start_spoofing_selected(self) -> None:
        selected = self.selected_location
        if selected is None:
            self.engine.record_error(SpoofErrorKind.INVALID_COORDINATE)
            self._show_error(SpoofErrorKind.INVALID_COORDINATE.message)
            return
        self._start_spoofing(selected, None)

    def focus(self, bookmark: Bookmark, auto_start_override: Optional[bool] = None) -> None:
        point = bookmark.location_point
        self.state.set("selected_location", point)
        self._center_map(point.coordinate)

        should_start = (
            auto_start_override
            if auto_start_override is not None
            else self.settings.auto_start_from_bookmarks
        )
        if should_start:
            self._start_spoofing(point, bookmark)

    def stop_spoofing(self) -> None:
        try:
            self.engine.stop()
        except UseCaseError as err:
            self._show_error(err.message)
            return
        self.bookmark_store.mark_as_last_used(None)
        self.authorizer.force_refresh()
        # Next real fix re-centres the map.
        self._has_centered_on_user = False

    def _start_spoofing(self, point: LocationPoint, bookmark: Optional[Bookmark]) -> None:
        try:
            self.engine.start(point)
        except UseCaseError as err:
            self._show_error(err.message)
            return
        self.bookmark_store.mark_as_last_used(bookmark)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def set_search_text(self, text: str, *, search: bool = False) -> None:
        self.state.set("search_text", text or "")
        if search:
            self.perform_search()

    def perform_search(self) -> None:
        query = (self.search_text or "").strip()
        if not query:
            self._cancel_search()
            self.state.update(search_results=(), show_search_results=False, is_searching=False)
            return

        self._cancel_search()
        token = CancelToken()
        self._search_token = token
        self.state.set("is_searching", True)
        future = self.executor.submit(self.uc_search, query, token)
        future.add_done_callback(
            lambda fut: self._dispatch(lambda: self._finish_search(token, fut))
        )

    def _finish_search(self, token: CancelToken, future: Future) -> None:
        if token.cancelled or token is not self._search_token or future.cancelled():
            return
        self._search_token = None
        error = future.exception()
        if error is not None:
            log.warning("Place search failed: %s", error)
            self.state.set("is_searching", False)
            return
        results: Tuple[SearchResult, ...] = tuple(future.result() or ())
        self.state.update(
            search_results=results,
            show_search_results=bool(results),
            is_searching=False,
        )

    def select_search_result(self, result: SearchResult) -> None:
        self._cancel_search()
        coordinate = result.coordinate
        self.state.set(
            "selected_location",
            LocationPoint(coordinate=coordinate, label=result.title, note=result.subtitle),
        )
        self._center_map(coordinate)
        self.state.update(
            show_search_results=False,
            search_results=(),
            search_text=result.title,
            is_searching=False,
        )

    def clear_search(self) -> None:
        self._cancel_search()
        self.state.update(
            search_text="",
            search_results=(),
            show_search_results=False,
            is_searching=False,
        )

    def _cancel_search(self) -> None:
        token, self._search_token = self._search_token, None
        if token is not None:
            token.cancel()

    # ------------------------------------------------------------------
    # Real location
    # ------------------------------------------------------------------
    def center_on_real_location(self) -> None:
        """Refresh the device location and centre on the first fresh fix.

        Fixes stamped more than ``freshness_tolerance_s`` before the refresh
        are ignored. Gives up after ``fix_check_s + fix_grace_s``.
        """
        self._cancel_real_location_wait()
        refresh_time = self._clock()
        self.authorizer.force_refresh()

        def _on_fix(_name: str, _old: Any, fix: Optional[LocationFix]) -> None:
            if fix is not None and self._is_fresh(fix, refresh_time):
                self._finish_real_location_wait(fix)

        self._real_location_sub = self.authorizer.state.subscribe(_on_fix, names=("current_fix",))
        self.scheduler.schedule(
            CENTER_CHECK_CHANNEL,
            to_ms(self.authorizer.timings.fix_check_s),
            lambda: self._check_real_location(refresh_time),
        )

    def _check_real_location(self, refresh_time: datetime) -> None:
        if self._real_location_sub is None:
            return
        fix = self.authorizer.current_fix
        if fix is not None and self._is_fresh(fix, refresh_time):
            self._finish_real_location_wait(fix)
            return
        self.scheduler.schedule(
            CENTER_GRACE_CHANNEL,
            to_ms(self.authorizer.timings.fix_grace_s),
            self._give_up_real_location,
        )

    def _give_up_real_location(self) -> None:
        self._cancel_real_location_wait()
        if self.authorizer.current_fix is None:
            self._show_error(SpoofErrorKind.LOCATION_UNAVAILABLE.message)

    def _finish_real_location_wait(self, fix: LocationFix) -> None:
        self._cancel_real_location_wait()
        self._center_map(fix.coordinate)

    def _cancel_real_location_wait(self) -> None:
        sub, self._real_location_sub = self._real_location_sub, None
        if sub is not None:
            sub.cancel()
        self.scheduler.cancel(CENTER_CHECK_CHANNEL)
        self.scheduler.cancel(CENTER_GRACE_CHANNEL)

    def _is_fresh(self, fix: LocationFix, refresh_time: datetime) -> bool:
        return is_fresh_fix(
            fix, refresh_time, tolerance_s=self.authorizer.timings.freshness_tolerance_s
        )

    # ------------------------------------------------------------------
    # Alerts / lifecycle
    # ------------------------------------------------------------------
    def dismiss_error(self) -> None:
        self.state.update(show_error_alert=False, error_message=None)

    def close(self) -> None:
        """Detach from collaborators and drop pending timers and searches."""
        self._cancel_search()
        self._cancel_real_location_wait()
        for channel in (PERMISSION_REFRESH_CHANNEL, PERMISSION_CENTER_CHANNEL):
            self.scheduler.cancel(channel)
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _on_session_changed(self, session: Session) -> None:
        if not session.is_active:
            self.bookmark_store.mark_as_last_used(None)
        self.state.set("session", session)

    def _on_fix_changed(self, _name: str, _old: Any, fix: Optional[LocationFix]) -> None:
        if fix is None:
            return
        if not self._has_centered_on_user and not self.engine.session.is_active:
            self._has_centered_on_user = True
            self._center_map(fix.coordinate)

    def _center_map(self, coordinate: Coordinate) -> None:
        animation = ANIMATION_SPRING if self.settings.damped_animations else ANIMATION_DEFAULT
        self.state.update(
            map_animation=animation,
            map_region=self.map_region.recentered(coordinate),
            last_map_center=coordinate,
        )

    def _show_error(self, message: str) -> None:
        self.state.update(error_message=message, show_error_alert=True)


__all__ = ["DEFAULT_CENTER", "MapVM"]
