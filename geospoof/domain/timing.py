"""Delay constants and the freshness rule for location refreshes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .entities import LocationFix


@dataclass(frozen=True)
class RefreshTimings:
    """Fixed delays, in seconds, used to sequence location refreshes.

    Attributes:
        restart_delay_s: Pause between stopping and restarting updates.
        permission_settle_s: Wait after a permission request before refreshing.
        fix_check_s: First check for a fresh fix after a refresh.
        fix_grace_s: Additional wait before giving up on a fresh fix.
        freshness_tolerance_s: How far before the refresh a fix may be stamped.
    """

    restart_delay_s: float = 0.2
    permission_settle_s: float = 0.5
    fix_check_s: float = 1.0
    fix_grace_s: float = 4.0
    freshness_tolerance_s: float = 1.0

    def __post_init__(self) -> None:
        for name, value in self.__dict__.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative.")

    @property
    def overall_timeout_s(self) -> float:
        return self.fix_check_s + self.fix_grace_s


def to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def is_fresh_fix(
    fix: LocationFix, refresh_time: datetime, *, tolerance_s: float = 1.0
) -> bool:
    """Return True if ``fix`` was taken no earlier than ``tolerance_s`` before ``refresh_time``."""
    return fix.timestamp >= refresh_time - timedelta(seconds=tolerance_s)


__all__ = ["RefreshTimings", "is_fresh_fix", "to_ms"]
