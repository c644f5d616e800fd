from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from geospoof.domain.entities import Coordinate, SearchResult
from geospoof.domain.ports import CancelToken, GeocodingPort


def _default_places() -> List[SearchResult]:
    return [
        SearchResult(Coordinate(39.9042, 116.4074), "北京", "北京市, 中国"),
        SearchResult(Coordinate(31.2304, 121.4737), "上海", "上海市, 中国"),
        SearchResult(Coordinate(35.6762, 139.6503), "Tokyo", "Tokyo, Japan"),
        SearchResult(Coordinate(48.8566, 2.3522), "Paris", "Île-de-France, France"),
    ]


@dataclass
class GeocoderMock(GeocodingPort):
    """Offline substitute for ``NominatimGeocoder`` matching on substrings."""

    places: List[SearchResult] = field(default_factory=_default_places)
    queries: List[str] = field(default_factory=list)

    def search(
        self, query: str, *, limit: int = 10, cancel_token: Optional[CancelToken] = None
    ) -> List[SearchResult]:
        self.queries.append(query)
        needle = query.strip().lower()
        hits = [
            place
            for place in self.places
            if needle in place.title.lower() or needle in place.subtitle.lower()
        ]
        return hits[:limit]
