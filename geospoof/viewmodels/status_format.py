"""Session-to-label helpers for the map screen.

Call context:
    ``MapVM`` derives its status banner and primary button text from the
    engine session through these helpers.
"""

from __future__ import annotations

from ..domain.entities import MapStatus, Session

STATUS_ACTIVE_TITLE = "定位模拟已开启"
STATUS_INACTIVE_TITLE = "定位模拟已关闭"
STATUS_INACTIVE_DETAIL = "点击地图即可放置定位点"
BUTTON_STOP = "停止模拟"
BUTTON_START = "开始模拟"


def map_status(session: Session) -> MapStatus:
    """Project the session into banner title/detail text."""
    point = session.active_point
    if point is not None:
        return MapStatus(
            title=STATUS_ACTIVE_TITLE,
            detail=point.label or point.coordinate_description,
            is_active=True,
        )
    return MapStatus(title=STATUS_INACTIVE_TITLE, detail=STATUS_INACTIVE_DETAIL, is_active=False)


def primary_button_title(session: Session) -> str:
    return BUTTON_STOP if session.is_active else BUTTON_START


__all__ = [
    "BUTTON_START",
    "BUTTON_STOP",
    "STATUS_ACTIVE_TITLE",
    "STATUS_INACTIVE_DETAIL",
    "STATUS_INACTIVE_TITLE",
    "map_status",
    "primary_button_title",
]
