"""Adapter, use-case, and view-model wiring for the app runtime.

This module owns construction of the concrete adapters and the objects that
depend on values in :class:`geospoof.viewmodels.settings_vm.SettingsVM`.
The Tk front end and tests both build the object graph through it.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional

from ..adapters.bookmark_store_local import BookmarkStoreLocal
from ..adapters.geocoding_mock import GeocoderMock
from ..adapters.geocoding_nominatim import NominatimGeocoder
from ..adapters.location_service_mock import LocationServiceMock
from ..adapters.simulator_mock import LocationSimulatorMock
from ..adapters.storage_local import StorageLocal
from ..domain.ports import GeocodingPort, LocationServicePort, LocationSimulatorPort
from ..usecases.import_legacy_bookmarks import ImportLegacyBookmarks
from ..usecases.search_places import SearchPlaces
from ..usecases.spoofing_engine import SpoofingEngine
from ..utils import logging as logging_utils
from ..utils.delay_scheduler import CancelFn, DelayScheduler, ScheduleFn
from ..viewmodels.bookmarks_vm import BookmarksVM
from ..viewmodels.location_authorizer import LocationAuthorizer
from ..viewmodels.map_vm import DEFAULT_CENTER, MapVM
from ..viewmodels.settings_vm import SettingsVM

Dispatch = Callable[[Callable[[], None]], None]

log = logging.getLogger(__name__)


class AppController:
    """Create and own the runtime object graph.

    Call chain:
        ``geospoof.app.main.App`` creates one instance with Tk scheduling
        callables; tests pass a manual scheduler and mock ports instead.
    """

    def __init__(
        self,
        *,
        root_dir: str,
        schedule: ScheduleFn,
        cancel: CancelFn,
        dispatch: Optional[Dispatch] = None,
        location_service: Optional[LocationServicePort] = None,
        simulator: Optional[LocationSimulatorPort] = None,
        geocoder: Optional[GeocodingPort] = None,
        executor: Optional[Executor] = None,
        offline: bool = False,
    ) -> None:
        """Load settings and build adapters, use cases, and view models.

        Args:
            root_dir: Directory holding ``user_settings.json`` and bookmarks.
            schedule: ``after(delay_ms, callback)``-compatible timer function.
            cancel: ``after_cancel(token)``-compatible cancel function.
            dispatch: Marshals worker-thread callbacks onto the UI thread.
            location_service: OS location service; a scripted mock by default.
            simulator: Location-simulation backend; an in-memory mock by default.
            geocoder: Place search backend; Nominatim unless ``offline``.
            executor: Worker pool for searches; one background thread by default.
                Required together with ``dispatch`` so results reach the UI thread.
            offline: Use the canned geocoder instead of the network.

        Raises:
            ValueError: If the controller must create its own worker pool but
                no ``dispatch`` callable was given.
        """
        if executor is None and dispatch is None:
            raise ValueError("dispatch is required when AppController owns the search executor.")

        self.storage = StorageLocal(root_dir=root_dir)
        self.settings_vm = SettingsVM()
        self._load_settings()
        logging_utils.apply_gui_preferences(self.settings_vm.debug_logging)
        settings = self.settings_vm.config

        self.scheduler = DelayScheduler(schedule, cancel)
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="search")

        self.location_service = location_service or LocationServiceMock(home=DEFAULT_CENTER)
        self.simulator = simulator or LocationSimulatorMock()
        if geocoder is None:
            geocoder = (
                GeocoderMock()
                if offline
                else NominatimGeocoder(
                    settings.geocoder_base_url, request_timeout_s=settings.request_timeout_s
                )
            )
        self.geocoder = geocoder

        self.bookmark_store = BookmarkStoreLocal(root_dir=root_dir)
        self.engine = SpoofingEngine(self.simulator)
        self.uc_search = SearchPlaces(self.geocoder, limit=settings.search_limit)
        self.uc_import_legacy = ImportLegacyBookmarks(self.bookmark_store)

        self.authorizer = LocationAuthorizer(
            self.location_service,
            self.scheduler,
            timings=settings.timings,
            dispatch=dispatch,
        )
        self.map_vm = MapVM(
            engine=self.engine,
            settings=settings,
            bookmark_store=self.bookmark_store,
            authorizer=self.authorizer,
            scheduler=self.scheduler,
            uc_search=self.uc_search,
            executor=self.executor,
            dispatch=dispatch,
        )
        self.bookmarks_vm = BookmarksVM(
            store=self.bookmark_store,
            map_vm=self.map_vm,
            settings=settings,
            uc_import_legacy=self.uc_import_legacy,
        )

    def _load_settings(self) -> None:
        """Apply ``user_settings.json``; write the defaults there on first run.

        An unreadable or invalid file is logged and left untouched, and the
        defaults are used for this session.
        """
        try:
            persisted = self.storage.load_user_settings()
            if persisted is not None:
                self.settings_vm.apply_dict(persisted)
        except (OSError, ValueError) as exc:
            log.warning("Ignoring stored settings in %s: %s", self.storage.settings_path, exc)
            return
        if persisted is None:
            try:
                self.storage.save_user_settings(self.settings_vm.to_dict())
            except OSError as exc:
                log.warning("Could not write default settings: %s", exc)

    def shutdown(self) -> None:
        """Stop timers and workers; leaves any running simulation in place."""
        self.bookmarks_vm.close()
        self.map_vm.close()
        self.scheduler.cancel_all()
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["AppController"]
