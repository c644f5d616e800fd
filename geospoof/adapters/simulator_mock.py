from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from geospoof.domain.ports import LocationSimulatorPort

log = logging.getLogger(__name__)


class LocationSimulatorMock(LocationSimulatorPort):
    """In-memory simulator used for tests and offline development.

    Records every call so tests can assert the clear/set ordering.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, ...]] = []
        self.current: Optional[Tuple[float, float]] = None
        self.timezone_updates = 0

    def set(self, latitude: float, longitude: float) -> None:
        self.calls.append(("set", latitude, longitude))
        self.current = (latitude, longitude)
        log.info("Simulated location set to %.5f, %.5f", latitude, longitude)

    def clear(self) -> None:
        self.calls.append(("clear",))
        self.current = None

    def notify_timezone_update(self) -> None:
        self.calls.append(("timezone",))
        self.timezone_updates += 1
