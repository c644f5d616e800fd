"""Shared HTTP transport utilities for REST adapters.

This module provides a thin wrapper around ``requests.Session`` so adapter
implementations can share timeout policy, retry behavior, and the identifying
``User-Agent`` header public geocoders require.

Dependencies:
    - ``requests`` for network I/O.
    - ``geospoof.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``geospoof/adapters/geocoding_nominatim.py``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from geospoof.adapters.api_errors import ApiTimeoutError
from geospoof.domain.ports import CancelToken

DEFAULT_USER_AGENT = "geospoof/0.1 (location bookmarks)"


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for JSON API calls.
        retries: Number of retry attempts after the initial request.
        user_agent: Value sent in the ``User-Agent`` header.
    """
    request_timeout_s: int = 10
    retries: int = 1
    user_agent: str = DEFAULT_USER_AGENT


class RetryingSession:
    """Shared requests wrapper with identifying headers and retry loops.

    This class is transport-only. Callers provide endpoint URLs and decide how
    to map non-2xx responses into domain/use-case errors.
    """

    def __init__(self, cfg: Optional[HttpConfig] = None, *, session: Optional[requests.Session] = None) -> None:
        """Create a retry-enabled session.

        Args:
            cfg: Shared timeout, retry, and header settings.
            session: Optional pre-built ``requests.Session`` (tests inject fakes).
        """
        self.session = session or requests.Session()
        self.cfg = cfg or HttpConfig()

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        return {"Accept": accept, "User-Agent": self.cfg.user_agent}

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        accept: str = "application/json",
        timeout: Optional[int] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Args:
            url: Absolute endpoint URL.
            params: Optional query parameter mapping.
            accept: ``Accept`` header value.
            timeout: Optional timeout override in seconds.
            cancel_token: Stops further retry attempts once cancelled.

        Returns:
            ``requests.Response`` from the first successful attempt.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors,
                or the token was cancelled between attempts.
        """
        context = f"GET {url}"
        last_err = ApiTimeoutError(f"Request to {url} was cancelled", context=context)
        attempts = self.cfg.retries + 1
        for _ in range(attempts):
            if cancel_token is not None and cancel_token.cancelled:
                break
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(accept=accept),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err


__all__ = ["DEFAULT_USER_AGENT", "HttpConfig", "RetryingSession"]
