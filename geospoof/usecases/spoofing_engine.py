"""Owns the spoofing session and drives the location simulator.

Call context:
    ``AppController`` creates one engine per app. ``MapVM`` starts and stops
    sessions and listens to ``session_changed`` to refresh status text.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.entities import LocationPoint, Session
from ..domain.errors import SpoofErrorKind
from ..domain.ports import LocationSimulatorPort, UseCaseError
from ..utils.observable import Signal

log = logging.getLogger(__name__)


class SpoofingEngine:
    """Start/stop location simulation and expose the resulting session."""

    def __init__(self, simulator: LocationSimulatorPort) -> None:
        self._simulator = simulator
        self._session = Session.inactive()
        self.last_error: Optional[SpoofErrorKind] = None
        self.session_changed = Signal("session")

    @property
    def session(self) -> Session:
        return self._session

    def start(self, point: LocationPoint) -> Session:
        """Replace any running simulation with ``point``.

        Raises:
            UseCaseError: ``SIMULATION_FAILED`` if the simulator rejects the
                request; the session is left unchanged.
        """
        coord = point.coordinate
        try:
            self._simulator.clear()
            self._simulator.set(coord.latitude, coord.longitude)
            self._simulator.notify_timezone_update()
        except UseCaseError:
            raise
        except Exception as exc:
            log.error("Simulator failed to start at %s: %s", coord, exc)
            raise UseCaseError("SIMULATION_FAILED", f"Could not start simulation: {exc}") from exc
        log.info("Spoofing started at %s", point.label or point.coordinate_description)
        self._set_session(Session.active(point))
        return self._session

    def stop(self) -> Session:
        try:
            self._simulator.clear()
            self._simulator.notify_timezone_update()
        except Exception as exc:
            log.error("Simulator failed to stop: %s", exc)
            raise UseCaseError("SIMULATION_FAILED", f"Could not stop simulation: {exc}") from exc
        log.info("Spoofing stopped")
        self._set_session(Session.inactive())
        return self._session

    def record_error(self, kind: SpoofErrorKind) -> None:
        self.last_error = kind
        log.warning("Spoofing error recorded: %s", kind.value)

    def _set_session(self, session: Session) -> None:
        self._session = session
        self.session_changed.emit(session)


__all__ = ["SpoofingEngine"]
