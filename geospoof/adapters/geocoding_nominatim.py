"""Place search against an OpenStreetMap Nominatim-compatible endpoint.

Call context:
    ``AppController`` builds one instance from ``LocSimSettings`` and hands it
    to ``SearchPlaces``. Requests run on the search worker thread, never on the
    UI thread.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from geospoof.adapters.api_errors import ApiError, raise_for_status
from geospoof.adapters.http_client import HttpConfig, RetryingSession
from geospoof.domain.entities import Coordinate, SearchResult
from geospoof.domain.ports import CancelToken, GeocodingPort

DEFAULT_BASE_URL = "https://nominatim.openstreetmap.org"

log = logging.getLogger(__name__)


class NominatimGeocoder(GeocodingPort):
    """``GeocodingPort`` implementation backed by the Nominatim search API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        request_timeout_s: int = 10,
        retries: int = 1,
        session: Optional[RetryingSession] = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.http = session or RetryingSession(
            HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        )

    def search(
        self, query: str, *, limit: int = 10, cancel_token: Optional[CancelToken] = None
    ) -> List[SearchResult]:
        url = f"{self.base_url}/search"
        params = {"q": query, "format": "json", "limit": int(limit), "addressdetails": 1}
        resp = self.http.get(url, params=params, cancel_token=cancel_token)
        raise_for_status(resp, f"search '{query}'")
        try:
            rows = resp.json()
        except ValueError as exc:
            raise ApiError(f"search '{query}': invalid JSON", payload=resp.text[:400]) from exc
        if not isinstance(rows, list):
            raise ApiError(f"search '{query}': unexpected payload", payload=rows)

        results: List[SearchResult] = []
        for row in rows:
            result = self._to_result(row)
            if result is not None:
                results.append(result)
        log.debug("Geocoder returned %d/%d usable rows for %r", len(results), len(rows), query)
        return results

    @staticmethod
    def _to_result(row: Any) -> Optional[SearchResult]:
        if not isinstance(row, dict):
            return None
        try:
            coordinate = Coordinate(float(row["lat"]), float(row["lon"]))
        except (KeyError, TypeError, ValueError):
            return None
        display = str(row.get("display_name") or "").strip()
        name = str(row.get("name") or "").strip() or _first_segment(display)
        return SearchResult(
            coordinate=coordinate,
            name=name or None,
            subtitle=display,
            id=str(row.get("place_id") or f"{coordinate.latitude},{coordinate.longitude}"),
        )


def _first_segment(display_name: str) -> str:
    return display_name.split(",", 1)[0].strip()


__all__ = ["DEFAULT_BASE_URL", "NominatimGeocoder"]
