"""Scriptable stand-in for the OS location service.

The fake records what the authorizer asked for and lets callers push
authorization changes, fixes, and delivery errors through the delegate, the
same way the OS would on the UI thread.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from geospoof.domain.entities import AuthorizationStatus, Coordinate, LocationFix
from geospoof.domain.ports import LocationDelegate, LocationServicePort


class LocationServiceMock(LocationServicePort):
    def __init__(
        self,
        *,
        grant: AuthorizationStatus = AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
        home: Optional[Coordinate] = None,
    ) -> None:
        self.delegate: Optional[LocationDelegate] = None
        self.grant = grant
        self.home = home
        self.calls: List[str] = []
        self.updating = False

    # ---------- LocationServicePort ----------

    def set_delegate(self, delegate: Optional[LocationDelegate]) -> None:
        self.delegate = delegate

    def request_when_in_use_authorization(self) -> None:
        self.calls.append("request_when_in_use")
        self.emit_authorization(self.grant)

    def request_always_authorization(self) -> None:
        self.calls.append("request_always")
        self.emit_authorization(self.grant)

    def start_updating_location(self) -> None:
        self.calls.append("start")
        self.updating = True

    def stop_updating_location(self) -> None:
        self.calls.append("stop")
        self.updating = False

    def request_location(self) -> None:
        self.calls.append("request_location")
        if self.home is not None:
            self.emit_fix(self.home)

    # ---------- Test helpers ----------

    def emit_authorization(self, status: AuthorizationStatus) -> None:
        if self.delegate is not None:
            self.delegate.on_authorization_changed(status)

    def emit_fix(self, coordinate: Coordinate, timestamp: Optional[datetime] = None) -> LocationFix:
        fix = LocationFix(coordinate=coordinate, timestamp=timestamp or datetime.now(timezone.utc))
        self.emit_fixes([fix])
        return fix

    def emit_fixes(self, fixes: Sequence[LocationFix]) -> None:
        if self.delegate is not None:
            self.delegate.on_locations(list(fixes))

    def emit_error(self, error: Exception) -> None:
        if self.delegate is not None:
            self.delegate.on_error(error)
