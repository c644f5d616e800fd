from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..domain.entities import SearchResult
from ..domain.ports import CancelToken, GeocodingPort
from .error_mapping import map_api_error


@dataclass
class SearchPlaces:
    """Use case: natural-language place search through the geocoding port."""

    geocoder: GeocodingPort
    limit: int = 10

    def __call__(self, query: str, cancel_token: Optional[CancelToken] = None) -> List[SearchResult]:
        text = (query or "").strip()
        if not text:
            return []
        try:
            return list(self.geocoder.search(text, limit=self.limit, cancel_token=cancel_token))
        except Exception as exc:
            raise map_api_error(exc, default_code="SEARCH_FAILED") from exc
