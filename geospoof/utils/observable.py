"""Observer list and state container used in place of bound UI properties.

Views subscribe to a view model's ``ObservableState`` and re-render on each
``(name, old, new)`` change. Everything here runs on the UI thread; there is
no locking.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)

Listener = Callable[..., None]
ChangeListener = Callable[[str, Any, Any], None]


class Subscription:
    """Handle returned by ``subscribe``; ``cancel`` detaches the listener."""

    def __init__(self, owner: "Signal", listener: Listener) -> None:
        self._owner: Optional[Signal] = owner
        self.listener = listener

    @property
    def active(self) -> bool:
        return self._owner is not None

    def cancel(self) -> None:
        owner, self._owner = self._owner, None
        if owner is not None:
            owner._remove(self)


class Signal:
    """Ordered observer list. Listener failures are logged, not propagated."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subs: List[Subscription] = []

    def subscribe(self, listener: Listener) -> Subscription:
        sub = Subscription(self, listener)
        self._subs.append(sub)
        return sub

    def emit(self, *args: Any) -> None:
        for sub in list(self._subs):
            if not sub.active:
                continue
            try:
                sub.listener(*args)
            except Exception:
                log.exception("Listener on %s failed", self.name or "signal")

    def __len__(self) -> int:
        return len(self._subs)

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subs.remove(sub)
        except ValueError:
            pass


class ObservableState:
    """Named fields with change notification.

    Setting a field to an equal value is a no-op, so views only hear about
    real changes.
    """

    def __init__(self, **initial: Any) -> None:
        self._values: Dict[str, Any] = dict(initial)
        self.changed = Signal(type(self).__name__)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> bool:
        if name not in self._values:
            raise KeyError(f"Unknown state field '{name}'")
        old = self._values[name]
        if old == value and type(old) is type(value):
            return False
        self._values[name] = value
        self.changed.emit(name, old, value)
        return True

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set(name, value)

    def subscribe(
        self, listener: ChangeListener, names: Optional[Iterable[str]] = None
    ) -> Subscription:
        if names is None:
            return self.changed.subscribe(listener)
        wanted = frozenset(names)

        def _filtered(name: str, old: Any, new: Any) -> None:
            if name in wanted:
                listener(name, old, new)

        return self.changed.subscribe(_filtered)


class StateField:
    """Read-only attribute proxy onto ``instance.state[name]``."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance.state[self.name]

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(f"'{self.name}' is read-only; use the view model's commands.")


__all__ = ["ObservableState", "Signal", "StateField", "Subscription"]
