"""Observable wrapper around the OS location service.

Call context:
    ``MapVM`` owns one authorizer. The authorizer registers itself as the
    service delegate; service callbacks are marshalled onto the UI thread via
    ``dispatch`` before any state changes.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..utils.delay_scheduler import DelayScheduler
from ..domain.entities import AuthorizationStatus, Coordinate, LocationFix
from ..domain.ports import LocationServicePort
from ..domain.timing import RefreshTimings, to_ms
from ..utils.observable import ObservableState

log = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]

FORCE_REFRESH_CHANNEL = "force_refresh"


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class LocationAuthorizer:
    """Exposes authorization status and the latest fix as observable fields."""

    def __init__(
        self,
        service: LocationServicePort,
        scheduler: DelayScheduler,
        *,
        timings: Optional[RefreshTimings] = None,
        dispatch: Optional[Dispatch] = None,
    ) -> None:
        self._service = service
        self._scheduler = scheduler
        self.timings = timings or RefreshTimings()
        self._dispatch = dispatch or _call_now
        self.state = ObservableState(
            authorization_status=AuthorizationStatus.NOT_DETERMINED,
            current_fix=None,
        )
        service.set_delegate(self)

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self.state["authorization_status"]

    @property
    def current_fix(self) -> Optional[LocationFix]:
        return self.state["current_fix"]

    @property
    def current_coordinate(self) -> Optional[Coordinate]:
        fix = self.current_fix
        return fix.coordinate if fix is not None else None

    @property
    def is_authorized(self) -> bool:
        return self.authorization_status.is_authorized

    def request_authorization(self, always: bool = False) -> None:
        if always:
            self._service.request_always_authorization()
        else:
            self._service.request_when_in_use_authorization()
        self._service.start_updating_location()

    def force_refresh(self) -> None:
        """Drop the cached fix and ask the service for a new one.

        Stops updates and clears ``current_fix`` immediately; the restart runs
        ``restart_delay_s`` later. Calling again before the restart fires
        replaces the pending restart.
        """
        self._service.stop_updating_location()
        self.state.set("current_fix", None)
        self._scheduler.schedule(
            FORCE_REFRESH_CHANNEL, to_ms(self.timings.restart_delay_s), self._restart_updates
        )

    def _restart_updates(self) -> None:
        self._service.start_updating_location()
        if self.is_authorized:
            self._service.request_location()

    # ---- LocationDelegate ----
    def on_authorization_changed(self, status: AuthorizationStatus) -> None:
        self._dispatch(lambda: self._apply_authorization(status))

    def on_locations(self, fixes: Sequence[LocationFix]) -> None:
        if not fixes:
            return
        latest = fixes[-1]
        self._dispatch(lambda: self.state.set("current_fix", latest))

    def on_error(self, error: Exception) -> None:
        log.warning("Location error: %s", error)

    def _apply_authorization(self, status: AuthorizationStatus) -> None:
        self.state.set("authorization_status", status)
        if status.is_authorized:
            self._service.start_updating_location()


__all__ = ["FORCE_REFRESH_CHANNEL", "LocationAuthorizer"]
