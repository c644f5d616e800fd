"""User-facing error kinds raised by the map and bookmark screens.

Each kind carries the message shown in the dismissable alert.
"""
from __future__ import annotations

from enum import Enum


class SpoofErrorKind(str, Enum):
    INVALID_COORDINATE = "invalid_coordinate"
    LOCATION_UNAVAILABLE = "location_unavailable"
    LEGACY_IMPORT_FAILED = "legacy_import_failed"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    SpoofErrorKind.INVALID_COORDINATE: "请先在地图上选择一个有效的位置",
    SpoofErrorKind.LOCATION_UNAVAILABLE: "无法获取真实位置，请检查定位权限设置",
    SpoofErrorKind.LEGACY_IMPORT_FAILED: "导入失败，请重试。",
}

NO_SELECTION_FOR_BOOKMARK = "请先在地图上选择一个位置"
