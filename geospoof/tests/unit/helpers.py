from __future__ import annotations

from concurrent.futures import Executor, Future
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from geospoof.adapters.bookmark_store_local import BookmarkStoreLocal
from geospoof.adapters.geocoding_mock import GeocoderMock
from geospoof.adapters.location_service_mock import LocationServiceMock
from geospoof.adapters.simulator_mock import LocationSimulatorMock
from geospoof.domain.entities import Coordinate
from geospoof.domain.ports import GeocodingPort
from geospoof.usecases.search_places import SearchPlaces
from geospoof.usecases.spoofing_engine import SpoofingEngine
from geospoof.utils.delay_scheduler import DelayScheduler
from geospoof.viewmodels.location_authorizer import LocationAuthorizer
from geospoof.viewmodels.map_vm import MapVM
from geospoof.viewmodels.settings_vm import LocSimSettings

BASE_TIME = datetime(2024, 5, 22, 12, 0, 0, tzinfo=timezone.utc)


class ManualScheduler:
    """Deterministic stand-in for Tk ``after``/``after_cancel`` plus a clock."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = 0
        self._timers: Dict[str, Tuple[int, int, Callable[[], None]]] = {}

    def after(self, delay_ms: int, callback: Callable[[], None]) -> str:
        self._seq += 1
        token = f"after#{self._seq}"
        self._timers[token] = (self.now_ms + int(delay_ms), self._seq, callback)
        return token

    def after_cancel(self, token: str) -> None:
        self._timers.pop(token, None)

    def advance(self, ms: int) -> None:
        target = self.now_ms + int(ms)
        while True:
            due = [(when, seq, token) for token, (when, seq, _cb) in self._timers.items() if when <= target]
            if not due:
                break
            when, _seq, token = min(due)
            _when, _s, callback = self._timers.pop(token)
            self.now_ms = when
            callback()
        self.now_ms = target

    def advance_s(self, seconds: float) -> None:
        self.advance(int(round(seconds * 1000)))

    @property
    def pending(self) -> int:
        return len(self._timers)

    def clock(self) -> datetime:
        return BASE_TIME + timedelta(milliseconds=self.now_ms)


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class DeferredExecutor(Executor):
    """Holds submitted work until the test runs it, to model in-flight searches."""

    def __init__(self) -> None:
        self.jobs: List[Tuple[Future, Callable[..., Any], tuple]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.jobs.append((future, fn, args))
        return future

    def run(self, index: int) -> None:
        future, fn, args = self.jobs[index]
        try:
            future.set_result(fn(*args))
        except Exception as exc:
            future.set_exception(exc)

    def run_all(self) -> None:
        for index in range(len(self.jobs)):
            if not self.jobs[index][0].done():
                self.run(index)


@dataclass
class MapHarness:
    vm: MapVM
    engine: SpoofingEngine
    simulator: LocationSimulatorMock
    service: LocationServiceMock
    store: BookmarkStoreLocal
    timers: ManualScheduler
    scheduler: DelayScheduler
    authorizer: LocationAuthorizer
    executor: Executor


def build_map_harness(
    root_dir: str,
    *,
    settings: Optional[LocSimSettings] = None,
    executor: Optional[Executor] = None,
    geocoder: Optional[GeocodingPort] = None,
    home: Optional[Coordinate] = None,
) -> MapHarness:
    settings = settings or LocSimSettings()
    timers = ManualScheduler()
    scheduler = DelayScheduler(timers.after, timers.after_cancel)
    service = LocationServiceMock(home=home)
    simulator = LocationSimulatorMock()
    engine = SpoofingEngine(simulator)
    store = BookmarkStoreLocal(root_dir=root_dir)
    authorizer = LocationAuthorizer(service, scheduler, timings=settings.timings)
    executor = executor or InlineExecutor()
    vm = MapVM(
        engine=engine,
        settings=settings,
        bookmark_store=store,
        authorizer=authorizer,
        scheduler=scheduler,
        uc_search=SearchPlaces(geocoder or GeocoderMock()),
        executor=executor,
        clock=timers.clock,
    )
    return MapHarness(
        vm=vm,
        engine=engine,
        simulator=simulator,
        service=service,
        store=store,
        timers=timers,
        scheduler=scheduler,
        authorizer=authorizer,
        executor=executor,
    )


__all__ = [
    "BASE_TIME",
    "DeferredExecutor",
    "InlineExecutor",
    "ManualScheduler",
    "MapHarness",
    "build_map_harness",
]
