"""Domain package exports for value objects and ports."""

from .entities import (
    AuthorizationStatus,
    Bookmark,
    Coordinate,
    EditorKind,
    EditorMode,
    LocationFix,
    LocationPoint,
    MapRegion,
    MapStatus,
    SearchResult,
    Session,
)
from .errors import SpoofErrorKind
from .ports import CancelToken, UseCaseError
from .timing import RefreshTimings, is_fresh_fix

__all__ = [
    "AuthorizationStatus",
    "Bookmark",
    "CancelToken",
    "Coordinate",
    "EditorKind",
    "EditorMode",
    "LocationFix",
    "LocationPoint",
    "MapRegion",
    "MapStatus",
    "RefreshTimings",
    "SearchResult",
    "Session",
    "SpoofErrorKind",
    "UseCaseError",
    "is_fresh_fix",
]
