"""
HTTP transport for the CryptoMarket REST client.

Wraps a requests.Session. The transport only moves bytes: it neither
interprets status codes nor retries; network failures are translated to
TransportError and everything else is returned to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cryptomkt_errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw HTTP response."""
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


class RequestsTransport:
    """
    Transport backed by a requests.Session.

    The session is created at construction and released by close();
    one instance may be shared between threads.

    Usage:
        with RequestsTransport(timeout=10) as transport:
            response = transport.execute("GET", "https://api.cryptomkt.com/v1/market", {})
    """

    def __init__(
        self,
        timeout: float = 30,
        pool_connections: int = 10,
        pool_maxsize: int = 10,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize transport.

        Args:
            timeout: Request timeout in seconds
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum connections kept per pool
            user_agent: Optional User-Agent header for every request
            session: Pre-built session (mounted adapters are left untouched)
        """
        self._timeout = timeout

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=pool_connections,
                pool_maxsize=pool_maxsize,
                max_retries=Retry(total=0),  # Failures surface immediately
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)

        if user_agent:
            session.headers["User-Agent"] = user_agent

        self._session = session

    def execute(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[str] = None,
    ) -> TransportResponse:
        """
        Execute one HTTP request.

        Args:
            method: HTTP method ("GET" or "POST")
            url: Absolute URL without query string
            headers: Request headers
            query: Query parameters
            body: Encoded request body

        Returns:
            TransportResponse with status and body text

        Raises:
            TransportError: On connection failure or timeout
        """
        try:
            response = self._session.request(
                method,
                url,
                params=query,
                data=body,
                headers=dict(headers),
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timeout: {method} {url}") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        return TransportResponse(
            status=response.status_code,
            body=response.text,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
