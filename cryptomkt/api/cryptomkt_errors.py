"""
CryptoMarket API Error Handling.

Maps transport responses to typed exceptions:
- Error classification by HTTP status (category and severity)
- Server message extraction from the JSON envelope
- Malformed response detection

CryptoMarket reports failures with a non-2xx status and a JSON body:
    {"status": "error", "message": "invalid signature"}

Nothing here retries or swallows errors; every failure reaches the caller.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = auto()       # Caller mistake, fix the request
    MEDIUM = auto()    # Transient, may succeed later
    HIGH = auto()      # Operation failed
    CRITICAL = auto()  # Credentials rejected, fix configuration


class ErrorCategory(Enum):
    """Categories of CryptoMarket API errors."""
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    INVALID_REQUEST = "invalid_request"
    SERVER = "server"
    NETWORK = "network"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Detailed information about an error."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    status: Optional[int] = None


# HTTP status mappings
STATUS_MAPPINGS: Dict[int, ErrorInfo] = {
    400: ErrorInfo(
        category=ErrorCategory.INVALID_REQUEST,
        severity=ErrorSeverity.LOW,
        message="Bad request",
        status=400,
    ),
    401: ErrorInfo(
        category=ErrorCategory.AUTHENTICATION,
        severity=ErrorSeverity.CRITICAL,
        message="Invalid API key, signature or timestamp",
        status=401,
    ),
    403: ErrorInfo(
        category=ErrorCategory.AUTHENTICATION,
        severity=ErrorSeverity.CRITICAL,
        message="API key lacks required permissions",
        status=403,
    ),
    404: ErrorInfo(
        category=ErrorCategory.NOT_FOUND,
        severity=ErrorSeverity.LOW,
        message="Resource not found",
        status=404,
    ),
    429: ErrorInfo(
        category=ErrorCategory.RATE_LIMIT,
        severity=ErrorSeverity.MEDIUM,
        message="API rate limit exceeded",
        status=429,
    ),
}


def classify_status(status: Optional[int]) -> ErrorInfo:
    """Classify an HTTP status into ErrorInfo."""
    if status is None:
        return ErrorInfo(
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.HIGH,
            message="Unknown error",
        )

    if status in STATUS_MAPPINGS:
        return STATUS_MAPPINGS[status]

    if 500 <= status < 600:
        return ErrorInfo(
            category=ErrorCategory.SERVER,
            severity=ErrorSeverity.MEDIUM,
            message="CryptoMarket server error",
            status=status,
        )

    if 400 <= status < 500:
        return ErrorInfo(
            category=ErrorCategory.INVALID_REQUEST,
            severity=ErrorSeverity.LOW,
            message="Request rejected",
            status=status,
        )

    return ErrorInfo(
        category=ErrorCategory.UNKNOWN,
        severity=ErrorSeverity.HIGH,
        message=f"Unexpected HTTP status {status}",
        status=status,
    )


class CryptoMktAPIError(Exception):
    """Base exception for CryptoMarket API errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response: Any = None,
        error_info: Optional[ErrorInfo] = None,
    ):
        self.message = message
        self.status = status
        self.response = response
        self.error_info = error_info or classify_status(status)

        if status is not None:
            super().__init__(f"CryptoMarket API error ({status}): {message}")
        else:
            super().__init__(f"CryptoMarket API error: {message}")

    @property
    def category(self) -> ErrorCategory:
        """Get error category."""
        return self.error_info.category

    @property
    def severity(self) -> ErrorSeverity:
        """Get error severity."""
        return self.error_info.severity


class TransportError(CryptoMktAPIError):
    """Network-level failure: connection refused, timeout, TLS error."""

    def __init__(self, message: str, response: Any = None):
        super().__init__(
            message,
            response=response,
            error_info=ErrorInfo(
                category=ErrorCategory.NETWORK,
                severity=ErrorSeverity.MEDIUM,
                message=message,
            ),
        )


class AuthenticationError(CryptoMktAPIError):
    """Bad signature, stale timestamp, unknown key or missing permission."""
    pass


class NotFoundError(CryptoMktAPIError):
    """Endpoint or resource does not exist."""
    pass


class RateLimitError(CryptoMktAPIError):
    """Specific exception for rate limit errors."""
    pass


class InvalidRequestError(CryptoMktAPIError):
    """Request rejected for invalid or missing parameters."""
    pass


class ServerError(CryptoMktAPIError):
    """CryptoMarket returned a 5xx status."""
    pass


class MalformedResponseError(CryptoMktAPIError):
    """Response body is not JSON or lacks the data field."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(
            message,
            status=status,
            response=response,
            error_info=ErrorInfo(
                category=ErrorCategory.MALFORMED_RESPONSE,
                severity=ErrorSeverity.HIGH,
                message=message,
                status=status,
            ),
        )


_CATEGORY_EXCEPTIONS = {
    ErrorCategory.AUTHENTICATION: AuthenticationError,
    ErrorCategory.NOT_FOUND: NotFoundError,
    ErrorCategory.RATE_LIMIT: RateLimitError,
    ErrorCategory.INVALID_REQUEST: InvalidRequestError,
    ErrorCategory.SERVER: ServerError,
}


def extract_error_message(raw_body: str) -> str:
    """
    Get the server's error message from a response body.

    Looks at "message", then "error", then a string "data" field of a JSON
    object, and falls back to the raw text.
    """
    try:
        payload = json.loads(raw_body)
    except (TypeError, ValueError):
        return raw_body.strip() if raw_body else ""

    if isinstance(payload, dict):
        for key in ("message", "error", "data"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value

    return raw_body.strip()


def raise_for_response(status: int, raw_body: str) -> None:
    """
    Raise the typed exception matching an error response.

    Does nothing for statuses below 400.

    Args:
        status: HTTP status code
        raw_body: Response body text

    Raises:
        Appropriate CryptoMktAPIError subclass
    """
    if status < 400:
        return

    error_info = classify_status(status)
    message = extract_error_message(raw_body) or error_info.message

    logger.warning(
        f"CryptoMarket request failed: {status} "
        f"{error_info.category.value}: {message}"
    )

    exc_class = _CATEGORY_EXCEPTIONS.get(error_info.category, CryptoMktAPIError)
    raise exc_class(message, status=status, response=raw_body, error_info=error_info)


def parse_envelope(status: int, raw_body: str) -> Any:
    """
    Parse a successful response and return its data field.

    Args:
        status: HTTP status code
        raw_body: Response body text

    Returns:
        Value of the top-level "data" field

    Raises:
        MalformedResponseError: If body is not a JSON object with "data"
    """
    try:
        payload = json.loads(raw_body)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Response is not valid JSON: {e}",
            status=status,
            response=raw_body,
        ) from e

    if not isinstance(payload, dict) or "data" not in payload:
        raise MalformedResponseError(
            "Response has no data field",
            status=status,
            response=payload,
        )

    return payload["data"]
