"""
HTTP transport for the Prometheus query API.

Provides a small GET-JSON client, response validation against the
Prometheus response schema, and an async wrapper that keeps the blocking
request off the event loop.
"""

import asyncio
import json
import logging
import ssl
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from .schemas import PrometheusResponse

logger = logging.getLogger("promchart.prometheus")


class PrometheusError(Exception):
    """Base class for Prometheus transport and query failures."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class PrometheusConnectionError(PrometheusError):
    """Server unreachable, timed out or answered with a non-API HTTP error."""


class PrometheusQueryError(PrometheusError):
    """Prometheus answered with status "error"."""

    def __init__(self, message: str, url: Optional[str] = None, error_type: Optional[str] = None):
        super().__init__(message, url)
        self.error_type = error_type


class PrometheusResponseError(PrometheusError):
    """Response body is not JSON or doesn't match the API response shape."""


def check_response(response: PrometheusResponse, url: Optional[str] = None) -> PrometheusResponse:
    """
    Raise PrometheusQueryError for status "error"; log any warnings.

    Returns:
        The response itself when it succeeded
    """
    if not response.is_success:
        raise PrometheusQueryError(
            f"{response.errorType or 'error'}: {response.error or 'unknown error'}",
            url,
            response.errorType,
        )

    for warning in response.warnings or []:
        logger.warning(f"Prometheus warning for {url or 'custom producer'}: {warning}")
    return response


class PrometheusHttpClient:
    """HTTP client for querying a Prometheus-compatible API."""

    def __init__(self, timeout: float = 30, headers: Optional[Dict[str, str]] = None, verify_ssl: bool = True):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            headers: Extra headers sent with every request
            verify_ssl: Set False to trust self-signed server certificates
        """
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._ssl_context = None if verify_ssl else self._create_unverified_context()

    def _create_unverified_context(self) -> ssl.SSLContext:
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def get_json(self, url: str) -> Dict[str, Any]:
        """
        Make a GET request and decode the JSON body.

        Prometheus reports query errors with 4xx/5xx codes and a JSON body,
        so error bodies are decoded too when they are JSON.

        Raises:
            PrometheusConnectionError: On network errors or non-JSON HTTP errors
            PrometheusResponseError: On a non-JSON success body
        """
        req = Request(url, headers=self.headers, method="GET")
        ssl_context = self._ssl_context if url.startswith("https://") else None

        try:
            with urlopen(req, timeout=self.timeout, context=ssl_context) as resp:
                raw = resp.read().decode("utf-8")
        except HTTPError as e:
            try:
                body = json.loads(e.read().decode("utf-8"))
            except (ValueError, OSError):
                raise PrometheusConnectionError(f"HTTP {e.code} from Prometheus", url) from e
            if isinstance(body, dict) and "status" in body:
                return body
            raise PrometheusConnectionError(f"HTTP {e.code} from Prometheus", url) from e
        except (URLError, OSError) as e:
            raise PrometheusConnectionError(f"Failed to reach Prometheus: {e}", url) from e

        try:
            return json.loads(raw) if raw else {}
        except ValueError as e:
            raise PrometheusResponseError(f"Invalid JSON from Prometheus: {e}", url) from e

    def query(self, url: str) -> PrometheusResponse:
        """
        Fetch and validate one API response.

        Returns:
            Parsed PrometheusResponse with status "success"

        Raises:
            PrometheusQueryError: When Prometheus reports status "error"
            PrometheusResponseError: When the body doesn't match the response shape
        """
        payload = self.get_json(url)
        try:
            response = PrometheusResponse.model_validate(payload)
        except ValidationError as e:
            raise PrometheusResponseError(f"Unexpected Prometheus response: {e}", url) from e
        return check_response(response, url)

    async def fetch(self, url: str) -> PrometheusResponse:
        """Run query() in the default executor to avoid blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.query, url)
