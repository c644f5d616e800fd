"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from geospoof.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
)
from geospoof.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by an adapter or port call.
        default_code: Code used when ``exc`` is not a known adapter error.
        default_message: Message used for unknown errors (falls back to ``str(exc)``).
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, ApiClientError):
        if exc.status == 429:
            return UseCaseError("RATE_LIMITED", "Too many searches, try again shortly.")
        if exc.status == 403:
            # Nominatim answers 403 when the usage policy blocks this client.
            return UseCaseError("SEARCH_BLOCKED", "Search service refused the request.")
        label = f"Request failed (HTTP {exc.status})" if exc.status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, exc.hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "Search service error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
