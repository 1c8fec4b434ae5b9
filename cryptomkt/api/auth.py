"""
CryptoMarket API Authentication.

Implements HMAC-SHA384 request signing for CryptoMarket private endpoints.
Every private request carries three headers: the API key, the signature and
the timestamp the signature was computed with.

Signing scheme:
1. Sort the request parameters by key
2. Concatenate the values (as text) in that order -> canonical body
3. message = timestamp + path + canonical body
4. HMAC-SHA384 of message keyed by the API secret, lowercase hex

GET requests sign with an empty body.

Usage:
    auth = CryptoMktAuth(api_key="...", api_secret="...")
    signed = auth.sign_request("/v1/orders/create", {"market": "ETHCLP", ...})
    headers = auth.headers_for(signed)
"""

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional


API_KEY_HEADER = "X-MKT-APIKEY"
SIGNATURE_HEADER = "X-MKT-SIGNATURE"
TIMESTAMP_HEADER = "X-MKT-TIMESTAMP"


@dataclass(frozen=True)
class CryptoMktCredentials:
    """API credentials for CryptoMarket authentication."""
    api_key: str
    api_secret: str = field(repr=False)

    def __post_init__(self):
        """Validate credentials."""
        if not self.api_key:
            raise ValueError("API key is required")
        if not self.api_secret:
            raise ValueError("API secret is required")


@dataclass(frozen=True)
class SignedRequest:
    """Signature material for a single private request."""
    timestamp: str
    path: str
    body: str
    signature: str

    def headers(self, api_key: str) -> Dict[str, str]:
        """Build the authentication headers for this request."""
        return {
            API_KEY_HEADER: api_key,
            SIGNATURE_HEADER: self.signature,
            TIMESTAMP_HEADER: self.timestamp,
        }


def format_param_value(value: Any) -> str:
    """
    Convert a request parameter value to the text sent on the wire.

    The same text is used for the canonical body, so the signature always
    matches what the server receives.
    """
    if isinstance(value, Enum):
        return format_param_value(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def canonical_body(params: Optional[Mapping[str, Any]]) -> str:
    """
    Build the canonical body of a parameter mapping.

    Values are ordered by their key and concatenated without separators.
    Numeric values are concatenated as text, never added.

    Args:
        params: Request parameters

    Returns:
        Canonical body string ("" for no parameters)
    """
    if not params:
        return ""
    return "".join(format_param_value(params[key]) for key in sorted(params))


def sign(timestamp: str, path: str, body: str, secret: str) -> str:
    """
    Compute the request signature.

    Args:
        timestamp: Unix time in seconds, as decimal text
        path: Endpoint path without query string
        body: Canonical body or empty string
        secret: API secret

    Returns:
        Lowercase hex HMAC-SHA384 digest of timestamp + path + body
    """
    message = timestamp + path + body
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha384,
    ).hexdigest()


class CryptoMktAuth:
    """
    Authentication handler for CryptoMarket private API.

    Holds the credentials and the clock used to timestamp requests.
    Signing mutates no state, so one instance may be shared between threads.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize authentication handler.

        Args:
            api_key: CryptoMarket API key
            api_secret: CryptoMarket API secret
            clock: Returns current Unix time in seconds
        """
        self._credentials = CryptoMktCredentials(api_key, api_secret)
        self._clock = clock

    @classmethod
    def from_credentials(
        cls,
        credentials: CryptoMktCredentials,
        clock: Callable[[], float] = time.time,
    ) -> "CryptoMktAuth":
        """Create from credentials object."""
        return cls(
            api_key=credentials.api_key,
            api_secret=credentials.api_secret,
            clock=clock,
        )

    @property
    def api_key(self) -> str:
        return self._credentials.api_key

    def generate_timestamp(self) -> str:
        """
        Get the current Unix time in whole seconds as decimal text.

        Sampled on every call; timestamps are never cached.
        """
        return str(int(self._clock()))

    def sign_request(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[str] = None,
    ) -> SignedRequest:
        """
        Sign a request for CryptoMarket private API.

        Args:
            path: API endpoint path (e.g., "/v1/orders/create")
            params: Parameters to sign (None or empty signs an empty body)
            timestamp: Optional explicit timestamp (sampled if not provided)

        Returns:
            SignedRequest with the signature and the timestamp it used
        """
        if timestamp is None:
            timestamp = self.generate_timestamp()

        body = canonical_body(params)
        signature = sign(timestamp, path, body, self._credentials.api_secret)

        return SignedRequest(
            timestamp=timestamp,
            path=path,
            body=body,
            signature=signature,
        )

    def headers_for(self, signed: SignedRequest) -> Dict[str, str]:
        """Get the authentication headers for a signed request."""
        return signed.headers(self._credentials.api_key)


def load_credentials_from_env() -> CryptoMktCredentials:
    """
    Load API credentials from environment variables.

    Expects:
        CRYPTOMKT_API_KEY: API key
        CRYPTOMKT_API_SECRET: API secret

    Returns:
        CryptoMktCredentials instance

    Raises:
        ValueError: If environment variables not set
    """
    import os

    api_key = os.environ.get("CRYPTOMKT_API_KEY", "")
    api_secret = os.environ.get("CRYPTOMKT_API_SECRET", "")

    if not api_key or not api_secret:
        raise ValueError(
            "CRYPTOMKT_API_KEY and CRYPTOMKT_API_SECRET environment variables required"
        )

    return CryptoMktCredentials(api_key=api_key, api_secret=api_secret)


def load_credentials_from_file(path: str) -> CryptoMktCredentials:
    """
    Load API credentials from a file.

    File format (one per line):
        api_key=YOUR_KEY
        api_secret=YOUR_SECRET

    Or JSON format:
        {"api_key": "...", "api_secret": "..."}

    Args:
        path: Path to credentials file

    Returns:
        CryptoMktCredentials instance
    """
    import json
    from pathlib import Path

    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Credentials file not found: {path}")

    content = file_path.read_text().strip()

    if content.startswith("{"):
        data = json.loads(content)
        return CryptoMktCredentials(
            api_key=data["api_key"],
            api_secret=data["api_secret"],
        )

    api_key = ""
    api_secret = ""

    for line in content.split("\n"):
        line = line.strip()
        if line.startswith("api_key="):
            api_key = line.split("=", 1)[1]
        elif line.startswith("api_secret="):
            api_secret = line.split("=", 1)[1]

    return CryptoMktCredentials(api_key=api_key, api_secret=api_secret)
