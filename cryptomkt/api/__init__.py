"""
CryptoMarket API Module.

Provides clients and utilities for interacting with the CryptoMarket exchange:
- Authentication (HMAC-SHA384 request signing)
- Public REST API (markets, ticker, order book, trades)
- Private REST API (balance, orders, instant exchange)
- Error handling (HTTP status mapping, envelope parsing)

Usage:
    # Public API (no credentials needed)
    from cryptomkt.api import CryptoMktClient

    ticker = CryptoMktClient().ticker(market="ETHCLP")

    # Private API
    from cryptomkt.api import OrderSide

    client = CryptoMktClient.from_env()  # Uses CRYPTOMKT_API_KEY, CRYPTOMKT_API_SECRET
    balance = client.balance()
    order = client.create_order(
        market="ETHCLP",
        type=OrderSide.BUY,
        amount="0.5",
        price="150000",
    )
"""

# Authentication
from .auth import (
    CryptoMktAuth,
    CryptoMktCredentials,
    SignedRequest,
    canonical_body,
    format_param_value,
    sign,
    load_credentials_from_env,
    load_credentials_from_file,
    API_KEY_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
)

# Error handling
from .cryptomkt_errors import (
    # Base errors
    CryptoMktAPIError,
    TransportError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    InvalidRequestError,
    ServerError,
    MalformedResponseError,
    # Error info
    ErrorInfo,
    ErrorCategory,
    ErrorSeverity,
    # Error mapping
    raise_for_response,
    parse_envelope,
)

# Transport
from .transport import (
    RequestsTransport,
    TransportResponse,
)

# REST client
from .client import (
    CryptoMktClient,
    # Request parameters
    BookRequest,
    TradesRequest,
    OrdersPageRequest,
    InstantOrderRequest,
    CreateOrderRequest,
    # Enums
    OrderSide,
)


__all__ = [
    # Authentication
    "CryptoMktAuth",
    "CryptoMktCredentials",
    "SignedRequest",
    "canonical_body",
    "format_param_value",
    "sign",
    "load_credentials_from_env",
    "load_credentials_from_file",
    "API_KEY_HEADER",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    # Errors
    "CryptoMktAPIError",
    "TransportError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "InvalidRequestError",
    "ServerError",
    "MalformedResponseError",
    "ErrorInfo",
    "ErrorCategory",
    "ErrorSeverity",
    "raise_for_response",
    "parse_envelope",
    # Transport
    "RequestsTransport",
    "TransportResponse",
    # Client
    "CryptoMktClient",
    "BookRequest",
    "TradesRequest",
    "OrdersPageRequest",
    "InstantOrderRequest",
    "CreateOrderRequest",
    "OrderSide",
]
