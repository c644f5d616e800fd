"""Root logger setup for the desktop app.

The GUI toggle (``SettingsVM.debug_logging``) and two environment variables
decide the level; the environment always wins. HTTP transport loggers stay at
WARNING unless DEBUG is in effect, so geocoder retries do not flood the
console.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
LEVEL_ENV_VAR = "GEOSPOOF_LOG_LEVEL"
DEBUG_ENV_VAR = "GEOSPOOF_DEBUG"
TRANSPORT_LOGGERS = ("urllib3", "requests")


def _coerce_level(value: Optional[str], fallback: int) -> int:
    text = (value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = logging.getLevelName(text.upper())
    return candidate if isinstance(candidate, int) else fallback


def _env_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _resolve_env_level() -> Optional[int]:
    explicit = os.getenv(LEVEL_ENV_VAR)
    if explicit:
        return _coerce_level(explicit, logging.INFO)
    if _env_truthy(os.getenv(DEBUG_ENV_VAR)):
        return logging.DEBUG
    return None


def _apply_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
    return level


def configure_root(default_level: int | str = logging.INFO) -> int:
    """Install a compact console handler and return the effective level.

    Environment overrides:
      - GEOSPOOF_LOG_LEVEL: explicit level name or number
      - GEOSPOOF_DEBUG: truthy -> DEBUG
    """
    if isinstance(default_level, str):
        fallback = _coerce_level(default_level, logging.INFO)
    else:
        fallback = int(default_level)
    effective = _resolve_env_level() or fallback

    if not logging.getLogger().handlers:
        logging.basicConfig(level=effective, format=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    return _apply_level(effective)


def apply_gui_preferences(debug_enabled: bool) -> int:
    """Apply the settings-dialog debug toggle unless the environment overrides it."""
    env_level = _resolve_env_level()
    if env_level is not None:
        return _apply_level(env_level)
    return _apply_level(logging.DEBUG if debug_enabled else logging.INFO)


def env_requests_debug() -> bool:
    """Return True if environment variables force DEBUG logging."""
    env_level = _resolve_env_level()
    return env_level is not None and env_level <= logging.DEBUG
