"""Shared HTTP transport utilities for REST adapters.

This module provides a thin wrapper around ``requests.Session`` so the ledger
gateway and relayer adapters share timeout policy, retry behavior, and
API-key header construction.

Dependencies:
    - ``requests`` for network I/O.
    - ``cipherreg.adapters.api_errors.ApiTimeoutError`` for typed transport
      failures.

Call context:
    - Constructed by ``cipherreg/adapters/ledger_rest.py`` and
      ``cipherreg/adapters/relayer_rest.py``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from cipherreg.adapters.api_errors import ApiTimeoutError


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for JSON API calls.
        retries: Number of retry attempts after the initial request.
    """
    request_timeout_s: int = 10
    retries: int = 2


class RetryingSession:
    """Shared requests wrapper with API-key headers and retry loops.

    This class is intentionally transport-only. Callers provide endpoint paths and
    decide how to map non-2xx responses into domain/use-case errors.
    """

    def __init__(self, base_url: str, api_key: Optional[str], cfg: HttpConfig) -> None:
        """Create a retry-enabled session.

        Args:
            base_url: Service root, e.g. ``http://127.0.0.1:8545/api``.
            api_key: API key value to place in ``X-API-Key`` headers, or ``None``.
            cfg: Shared timeout and retry settings.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.base_url = str(base_url or "").rstrip("/")
        self.api_key = api_key
        self.cfg = cfg

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
        """
        url = self.url(path)
        last_err: ApiTimeoutError | None = None
        for _ in range(self.cfg.retries + 1):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=f"GET {url}")
        raise last_err

    def post(
        self,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Send a JSON POST request with retries on transport failures.

        Signed writes are not idempotent, so only connection failures (the
        request never reached the server) are retried; read timeouts are not.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
        """
        url = self.url(path)
        data = None if json_body is None else json.dumps(json_body)
        last_err: ApiTimeoutError | None = None
        for _ in range(self.cfg.retries + 1):
            try:
                return self.session.post(
                    url,
                    data=data,
                    headers=self._headers(json_body=json_body is not None),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except req_exc.ConnectTimeout:
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=f"POST {url}")
            except req_exc.Timeout as exc:
                raise ApiTimeoutError(
                    f"Timeout waiting for {url}", context=f"POST {url}"
                ) from exc
            except req_exc.ConnectionError:
                last_err = ApiTimeoutError(f"Cannot reach {url}", context=f"POST {url}")
        raise last_err


__all__ = ["HttpConfig", "RetryingSession"]
