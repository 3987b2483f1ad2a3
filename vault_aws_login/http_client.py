"""Thin ``requests`` wrapper used for every network call.

Every request carries a timeout, and every transport-level failure surfaces
as ``HttpFetchError`` so callers have one exception type to catch at their
boundary. Non-2xx responses are returned, not raised; callers check ``ok``.
"""

from typing import Any, Dict, Optional

import requests
import structlog

logger = structlog.get_logger(__name__)

VAULT_TOKEN_HEADER = "X-Vault-Token"


class HttpFetchError(Exception):
    """Raised when a request could not be completed (timeout, DNS, TLS, refused connection)."""

    def __init__(self, method: str, url: str, cause: Exception):
        super().__init__(f"{method} {url} failed: {cause}")
        self.method = method
        self.url = url
        self.cause = cause

    def serialize(self) -> str:
        return f"{type(self.cause).__name__}: {self.cause}"


class VaultHttpClient:
    """Issues HTTP requests with an enforced timeout.

    Attributes:
        timeout: Seconds before a connect or read is abandoned
        session: Underlying ``requests.Session`` (injectable for tests)
    """

    def __init__(self, timeout: float, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(
        self,
        method: str,
        url: str,
        token: Optional[str] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send a request and return the response whatever its status.

        Args:
            method: HTTP verb; Vault's non-standard ``LIST`` is passed through as-is
            url: Absolute URL
            token: Vault token, sent as the ``X-Vault-Token`` header
            json: Body to send as JSON
            params: Query string parameters

        Raises:
            HttpFetchError: If no response was received within the timeout
        """
        headers = {}
        if token is not None:
            headers[VAULT_TOKEN_HEADER] = token

        logger.debug("HTTP request", method=method, url=url, timeout=self.timeout)
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(method, url, e) from e

        logger.debug("HTTP response", method=method, url=url, status_code=response.status_code)
        return response

    def get(self, url: str, **kwargs) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def list(self, url: str, **kwargs) -> requests.Response:
        return self.request("LIST", url, **kwargs)

    def close(self) -> None:
        self.session.close()
