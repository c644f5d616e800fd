from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Mapping, Optional

from ..adapters.geocoding_nominatim import DEFAULT_BASE_URL
from ..domain.timing import RefreshTimings
from ..utils.logging import env_requests_debug


@dataclass
class LocSimSettings:
    """Typed runtime settings that persist via StorageLocal."""

    map_span_degrees: float = 0.02
    auto_center_on_selection: bool = True
    auto_start_from_bookmarks: bool = False
    damped_animations: bool = True
    geocoder_base_url: str = DEFAULT_BASE_URL
    request_timeout_s: int = 10
    search_limit: int = 10
    restart_delay_s: float = 0.2
    permission_settle_s: float = 0.5
    fix_check_s: float = 1.0
    fix_grace_s: float = 4.0

    @property
    def timings(self) -> RefreshTimings:
        return RefreshTimings(
            restart_delay_s=self.restart_delay_s,
            permission_settle_s=self.permission_settle_s,
            fix_check_s=self.fix_check_s,
            fix_grace_s=self.fix_grace_s,
        )


_BOOL_KEYS = {"auto_center_on_selection", "auto_start_from_bookmarks", "damped_animations"}
_INT_KEYS = {"request_timeout_s", "search_limit"}
_SECONDS_KEYS = {"restart_delay_s", "permission_settle_s", "fix_check_s", "fix_grace_s"}


def _default_debug_logging() -> bool:
    return env_requests_debug()


class SettingsVM:
    """Keeps app settings UI state and validation, no I/O here."""

    def __init__(self, *, config: Optional[LocSimSettings] = None) -> None:
        self.config = config or LocSimSettings()
        self.debug_logging: bool = _default_debug_logging()

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed = {*LocSimSettings.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates = {
            key: self._coerce_config_value(key, payload[key])
            for key in LocSimSettings.__annotations__.keys()
            if key in payload
        }
        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "map_span_degrees":
            return self._coerce_span(raw)
        if key in _BOOL_KEYS:
            return self._coerce_bool(raw)
        if key in _INT_KEYS:
            return self._coerce_int(key, raw, minimum=1)
        if key in _SECONDS_KEYS:
            return self._coerce_seconds(key, raw)
        if key == "geocoder_base_url":
            text = str(raw or "").strip()
            return text or DEFAULT_BASE_URL
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_span(value: Any) -> float:
        try:
            span = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("map_span_degrees must be a number.") from exc
        if not 0.0 < span <= 180.0:
            raise ValueError("map_span_degrees must be within (0, 180].")
        return span

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, minimum: int = 0) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if coerced < minimum:
            raise ValueError(f"{name} must be >= {minimum}.")
        return coerced

    @staticmethod
    def _coerce_seconds(name: str, value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be a number of seconds.")
        try:
            seconds = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be a number of seconds.") from exc
        if seconds < 0:
            raise ValueError(f"{name} must be non-negative.")
        return seconds

