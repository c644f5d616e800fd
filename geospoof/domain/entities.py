"""Domain value objects shared across adapters, use-cases, and view models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4


@dataclass(frozen=True)
class Coordinate:
    """WGS84 latitude/longitude pair."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"Coordinate.{name} must be numeric.")
            object.__setattr__(self, name, float(value))
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Coordinate latitude must be within [-90, 90].")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Coordinate longitude must be within [-180, 180].")

    def describe(self) -> str:
        return f"{self.latitude:.5f}, {self.longitude:.5f}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class LocationPoint:
    """A coordinate the user picked, optionally labelled."""

    coordinate: Coordinate
    label: Optional[str] = None
    note: Optional[str] = None

    @property
    def coordinate_description(self) -> str:
        return self.coordinate.describe()


@dataclass(frozen=True)
class LocationFix:
    """Single device position report with the time it was taken."""

    coordinate: Coordinate
    timestamp: datetime
    """Timezone-aware time at which the location service produced the fix."""

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            raise TypeError("LocationFix requires a datetime timestamp.")
        if self.timestamp.tzinfo is None or self.timestamp.tzinfo.utcoffset(self.timestamp) is None:
            raise ValueError("LocationFix timestamp must be timezone-aware.")


class AuthorizationStatus(str, Enum):
    """Location permission states reported by the location service."""

    NOT_DETERMINED = "notDetermined"
    DENIED = "denied"
    AUTHORIZED_WHEN_IN_USE = "authorizedWhenInUse"
    AUTHORIZED_ALWAYS = "authorizedAlways"

    @property
    def is_authorized(self) -> bool:
        return self in (
            AuthorizationStatus.AUTHORIZED_WHEN_IN_USE,
            AuthorizationStatus.AUTHORIZED_ALWAYS,
        )


def new_bookmark_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class Bookmark:
    """Persisted, named coordinate the user can quickly re-select."""

    name: str
    coordinate: Coordinate
    note: Optional[str] = None
    id: str = field(default_factory=new_bookmark_id)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Bookmark id must be a non-empty string.")

    @property
    def location_point(self) -> LocationPoint:
        return LocationPoint(coordinate=self.coordinate, label=self.name, note=self.note)

    def with_changes(self, **changes) -> "Bookmark":
        return replace(self, **changes)


@dataclass(frozen=True)
class Session:
    """Spoofing session owned by the engine; read-only to view models.

    ``active_point`` is set exactly when ``is_active`` is true.
    """

    is_active: bool = False
    active_point: Optional[LocationPoint] = None

    def __post_init__(self) -> None:
        if self.is_active != (self.active_point is not None):
            raise ValueError("Session.active_point must be set iff the session is active.")

    @classmethod
    def inactive(cls) -> "Session":
        return cls()

    @classmethod
    def active(cls, point: LocationPoint) -> "Session":
        return cls(is_active=True, active_point=point)


@dataclass(frozen=True)
class MapRegion:
    """Visible map area: centre plus span in degrees."""

    center: Coordinate
    latitude_delta: float
    longitude_delta: float

    def recentered(self, center: Coordinate) -> "MapRegion":
        return replace(self, center=center)


@dataclass(frozen=True)
class MapStatus:
    title: str
    detail: str
    is_active: bool


UNKNOWN_PLACE_TITLE = "未知地点"


@dataclass(frozen=True)
class SearchResult:
    """One geocoding hit; discarded once a selection is made."""

    coordinate: Coordinate
    name: Optional[str] = None
    subtitle: str = ""
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def title(self) -> str:
        return self.name or UNKNOWN_PLACE_TITLE


class EditorKind(str, Enum):
    CREATE = "create"
    EDIT = "edit"


@dataclass(frozen=True)
class EditorMode:
    """Bookmark editor request: create (optionally prefilled) or edit."""

    kind: EditorKind
    point: Optional[LocationPoint] = None
    bookmark: Optional[Bookmark] = None

    def __post_init__(self) -> None:
        if self.kind is EditorKind.EDIT and self.bookmark is None:
            raise ValueError("EditorMode.edit requires a bookmark.")

    @classmethod
    def create(cls, point: Optional[LocationPoint] = None) -> "EditorMode":
        return cls(kind=EditorKind.CREATE, point=point)

    @classmethod
    def edit(cls, bookmark: Bookmark) -> "EditorMode":
        return cls(kind=EditorKind.EDIT, bookmark=bookmark)


__all__ = [
    "AuthorizationStatus",
    "Bookmark",
    "Coordinate",
    "EditorKind",
    "EditorMode",
    "LocationFix",
    "LocationPoint",
    "MapRegion",
    "MapStatus",
    "SearchResult",
    "Session",
    "UNKNOWN_PLACE_TITLE",
    "new_bookmark_id",
]
