"""Scheduler helper that owns named one-shot timers for view-model flows.

The app layer passes Tk ``after`` and ``after_cancel`` callables into this
class so timer state lives in one place. Each channel holds at most one
pending timer: scheduling again on a channel cancels the earlier one, which
keeps overlapping refresh sequences from racing each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

ScheduleFn = Callable[[int, Callable[[], None]], object]
CancelFn = Callable[[object], None]

log = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """Timer token associated with a single channel.

    Attributes:
        channel: Channel key such as ``force_refresh`` or ``center_check``.
        token: Scheduler token returned by the UI scheduler implementation.
    """
    channel: str
    token: object


class DelayScheduler:
    """Manage per-channel one-shot timers using a UI scheduler (for example Tk)."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, TimerHandle] = {}

    def schedule(self, channel: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule the timer for a channel.

        Args:
            channel: Timer channel key.
            delay_ms: Delay in milliseconds before callback execution.
            callback: Function to run on the UI thread.
        """
        delay = max(0, int(delay_ms))
        self.cancel(channel)
        handle = TimerHandle(channel=channel, token=None)

        def _fire() -> None:
            if self._handles.get(channel) is handle:
                del self._handles[channel]
            callback()

        handle.token = self._schedule(delay, _fire)
        self._handles[channel] = handle

    def cancel(self, channel: str) -> None:
        """Cancel a pending timer for a channel."""
        handle = self._handles.pop(channel, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception as exc:
            log.debug("Cancelling timer %s failed: %s", channel, exc)

    def cancel_all(self) -> None:
        """Cancel all pending timers across all channels."""
        for channel in list(self._handles.keys()):
            self.cancel(channel)

    def pending(self, channel: str) -> bool:
        return channel in self._handles

    def handle_for(self, channel: str) -> Optional[TimerHandle]:
        """Return the current handle for a channel, if scheduled."""
        return self._handles.get(channel)


__all__ = ["DelayScheduler", "TimerHandle"]
