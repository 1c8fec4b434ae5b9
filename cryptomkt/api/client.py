"""
CryptoMarket REST API Client.

Single client for public and private CryptoMarket endpoints:
- Public market data (markets, ticker, order book, trades)
- Account balance
- Order queries (active, executed, status)
- Order placement and cancellation (limit and instant orders)

Private endpoints are signed with HMAC-SHA384 (see auth.py). Every response
is a JSON envelope {"data": ...}; the client returns the data field.
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from .auth import (
    CryptoMktAuth,
    CryptoMktCredentials,
    format_param_value,
    load_credentials_from_env,
)
from .cryptomkt_errors import (
    AuthenticationError,
    parse_envelope,
    raise_for_response,
)
from .transport import RequestsTransport, TransportResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cryptomkt.com"

DateLike = Union[date, str]


class OrderSide(Enum):
    """Order and book side (buy/sell)."""
    BUY = "buy"
    SELL = "sell"


@dataclass
class BookRequest:
    """Parameters for the public order book."""
    market: str
    type: Union[OrderSide, str]
    page: int = 1
    limit: int = 20

    def to_params(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "type": self.type,
            "page": self.page,
            "limit": self.limit,
        }


@dataclass
class TradesRequest:
    """
    Parameters for the public trades list.

    Missing start/end dates default to today, resolved when the request
    is built.
    """
    market: str
    start: Optional[DateLike] = None
    end: Optional[DateLike] = None
    page: int = 1
    limit: int = 20

    def to_params(self) -> Dict[str, Any]:
        today = date.today()
        return {
            "market": self.market,
            "start": self.start if self.start is not None else today,
            "end": self.end if self.end is not None else today,
            "page": self.page,
            "limit": self.limit,
        }


@dataclass
class OrdersPageRequest:
    """Parameters for active/executed order listings (pages start at 0)."""
    market: str
    page: int = 0
    limit: int = 20

    def to_params(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "page": self.page,
            "limit": self.limit,
        }


@dataclass
class InstantOrderRequest:
    """Parameters for instant order quotes and instant order creation."""
    market: str
    type: Union[OrderSide, str]
    amount: Any

    def to_params(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "type": self.type,
            "amount": self.amount,
        }


@dataclass
class CreateOrderRequest:
    """Parameters for a limit order."""
    market: str
    type: Union[OrderSide, str]
    amount: Any
    price: Any

    def to_params(self) -> Dict[str, Any]:
        return {
            "market": self.market,
            "type": self.type,
            "amount": self.amount,
            "price": self.price,
        }


def prepare_params(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Drop unset parameters and convert the rest to wire text.

    The result is used both for the query/form body and for signing.
    """
    if not params:
        return {}
    return {
        key: format_param_value(value)
        for key, value in params.items()
        if value is not None
    }


class CryptoMktClient:
    """
    Client for CryptoMarket REST API.

    Usage:
        # From environment variables
        client = CryptoMktClient.from_env()

        # With explicit credentials and a staging origin
        client = CryptoMktClient(
            api_key="...",
            api_secret="...",
            base_url="https://staging.cryptomkt.com",
        )

        # Public market data
        ticker = client.ticker(market="ETHCLP")

        # Place order
        with CryptoMktClient.from_env() as client:
            order = client.create_order(
                market="ETHCLP",
                type=OrderSide.BUY,
                amount="0.5",
                price="150000",
            )
    """

    # Public endpoint paths
    BOOK_PATH = "/v1/book"
    TRADES_PATH = "/v1/trades"
    MARKET_PATH = "/v1/market"
    TICKER_PATH = "/v1/ticker"

    # Private endpoint paths
    ACTIVE_ORDERS_PATH = "/v1/orders/active"
    EXECUTED_ORDERS_PATH = "/v1/orders/executed"
    CANCEL_ORDER_PATH = "/v1/orders/cancel"
    ORDER_STATUS_PATH = "/v1/orders/status"
    INSTANT_ORDER_PATH = "/v1/orders/instant/get"
    CREATE_ORDER_PATH = "/v1/orders/create"
    CREATE_INSTANT_ORDER_PATH = "/v1/orders/instant/create"
    BALANCE_PATH = "/v1/balance"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        transport: Optional[Any] = None,
        clock: Callable[[], float] = time.time,
        http_logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize CryptoMarket client.

        Args:
            api_key: CryptoMarket API key (omit for public endpoints only)
            api_secret: CryptoMarket API secret (omit for public endpoints only)
            base_url: API origin (no trailing slash needed)
            timeout: Request timeout in seconds (for the default transport)
            transport: Object with an execute() method; when omitted the
                client creates and owns a RequestsTransport
            clock: Returns current Unix time in seconds
            http_logger: Optional logger receiving each request and response
        """
        self._auth: Optional[CryptoMktAuth] = None
        if api_key or api_secret:
            self._auth = CryptoMktAuth(api_key, api_secret, clock=clock)
        self._base_url = base_url.rstrip("/")
        self._http_logger = http_logger

        if transport is None:
            transport = RequestsTransport(timeout=timeout)
            self._owns_transport = True
        else:
            self._owns_transport = False
        self._transport = transport

        logger.info(
            f"Initialized CryptoMarket client (base_url={self._base_url})"
        )

    @classmethod
    def from_env(cls, **kwargs) -> "CryptoMktClient":
        """
        Create client from environment variables.

        Expects CRYPTOMKT_API_KEY and CRYPTOMKT_API_SECRET.
        """
        credentials = load_credentials_from_env()
        return cls.from_credentials(credentials, **kwargs)

    @classmethod
    def from_credentials(
        cls,
        credentials: CryptoMktCredentials,
        **kwargs,
    ) -> "CryptoMktClient":
        """Create client from credentials object."""
        return cls(
            api_key=credentials.api_key,
            api_secret=credentials.api_secret,
            **kwargs,
        )

    @classmethod
    def from_config(
        cls,
        config,
        credentials: Optional[CryptoMktCredentials] = None,
        **kwargs,
    ) -> "CryptoMktClient":
        """
        Create client from a CryptoMktConfig.

        Builds a RequestsTransport sized by the config and owns it, unless a
        transport is passed in kwargs. A base_url in kwargs overrides the
        config. Without credentials only public endpoints are usable.
        """
        transport = kwargs.pop("transport", None)
        owns_transport = transport is None
        base_url = kwargs.pop("base_url", config.base_url)

        if owns_transport:
            transport = RequestsTransport(
                timeout=config.request_timeout,
                pool_connections=config.pool_connections,
                pool_maxsize=config.pool_maxsize,
                user_agent=config.user_agent,
            )
        if config.log_responses and "http_logger" not in kwargs:
            kwargs["http_logger"] = logging.getLogger("cryptomkt.http")

        if credentials is not None:
            kwargs["api_key"] = credentials.api_key
            kwargs["api_secret"] = credentials.api_secret

        client = cls(
            base_url=base_url,
            transport=transport,
            **kwargs,
        )
        client._owns_transport = owns_transport
        return client

    @property
    def base_url(self) -> str:
        return self._base_url

    # ==========================================
    # REQUEST PRIMITIVES
    # ==========================================

    def _send(
        self,
        method: str,
        path: str,
        headers: Dict[str, str],
        query: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Any:
        """Execute a request, map errors and unwrap the envelope."""
        url = f"{self._base_url}{path}"

        logger.debug(f"{method} {path}")
        if self._http_logger:
            self._http_logger.debug(f"request: {method} {url} query={query} body={body}")

        response: TransportResponse = self._transport.execute(
            method,
            url,
            headers,
            query=query,
            body=body,
        )

        if self._http_logger:
            self._http_logger.debug(
                f"response: {response.status} {response.body}"
            )

        raise_for_response(response.status, response.body)
        return parse_envelope(response.status, response.body)

    def _sign(
        self,
        path: str,
        form: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        """Sign a private request with a freshly sampled timestamp."""
        if self._auth is None:
            raise AuthenticationError(
                f"API credentials required for private endpoint {path}"
            )
        signed = self._auth.sign_request(path, form)
        return self._auth.headers_for(signed)

    def public_get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Make unauthenticated GET request.

        Args:
            path: API endpoint path
            params: Query parameters (None values are dropped)

        Returns:
            The response's data field

        Raises:
            CryptoMktAPIError: On transport, HTTP or parsing failure
        """
        query = prepare_params(params)
        return self._send("GET", path, {}, query=query)

    def private_get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Make authenticated GET request.

        The signature covers timestamp and path only (empty body);
        parameters travel in the query string.

        Args:
            path: API endpoint path
            params: Query parameters (None values are dropped)

        Returns:
            The response's data field
        """
        query = prepare_params(params)
        headers = self._sign(path)
        return self._send("GET", path, headers, query=query)

    def private_post(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Make authenticated POST request.

        The signature covers the canonical body of the parameters; the wire
        body is the same parameters URL-encoded.

        Args:
            path: API endpoint path
            params: Form parameters (None values are dropped)

        Returns:
            The response's data field
        """
        form = prepare_params(params)
        headers = self._sign(path, form)
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        return self._send("POST", path, headers, body=urlencode(form))

    # ==========================================
    # PUBLIC MARKET DATA
    # ==========================================

    def book(
        self,
        market: str,
        type: Union[OrderSide, str],
        page: int = 1,
        limit: int = 20,
    ) -> Any:
        """
        Get the order book for a market.

        Args:
            market: Market pair (e.g., "ETHCLP")
            type: Book side, buy or sell
            page: Page number
            limit: Entries per page

        Returns:
            List of book entries
        """
        request = BookRequest(market=market, type=type, page=page, limit=limit)
        return self.public_get(self.BOOK_PATH, request.to_params())

    def trades(
        self,
        market: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Any:
        """
        Get executed trades for a market in a date range.

        Args:
            market: Market pair
            start: First day (date or "YYYY-MM-DD", default today)
            end: Last day (date or "YYYY-MM-DD", default today)
            page: Page number
            limit: Entries per page

        Returns:
            List of trades
        """
        request = TradesRequest(
            market=market,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        return self.public_get(self.TRADES_PATH, request.to_params())

    def market(self) -> Any:
        """Get the list of available market pairs."""
        return self.public_get(self.MARKET_PATH, {})

    def ticker(self, market: Optional[str] = None) -> Any:
        """
        Get tickers for active markets.

        Args:
            market: Only return this market's ticker

        Returns:
            List of ticker objects
        """
        return self.public_get(self.TICKER_PATH, {"market": market})

    # ==========================================
    # ACCOUNT AND ORDER QUERIES
    # ==========================================

    def active_orders(self, market: str, page: int = 0, limit: int = 20) -> Any:
        """Get the account's active orders in a market."""
        request = OrdersPageRequest(market=market, page=page, limit=limit)
        return self.private_get(self.ACTIVE_ORDERS_PATH, request.to_params())

    def executed_orders(self, market: str, page: int = 0, limit: int = 20) -> Any:
        """Get the account's executed orders in a market."""
        request = OrdersPageRequest(market=market, page=page, limit=limit)
        return self.private_get(self.EXECUTED_ORDERS_PATH, request.to_params())

    def order_status(self, order_id: str) -> Any:
        """Get the status of an order."""
        return self.private_get(self.ORDER_STATUS_PATH, {"id": order_id})

    def instant_order(
        self,
        market: str,
        type: Union[OrderSide, str],
        amount: Any,
    ) -> Any:
        """
        Quote an instant order at current market conditions.

        Returns the amount of crypto (buy) or local currency (sell) that
        would be received.
        """
        request = InstantOrderRequest(market=market, type=type, amount=amount)
        return self.private_get(self.INSTANT_ORDER_PATH, request.to_params())

    def balance(self) -> Any:
        """Get wallet balances."""
        return self.private_get(self.BALANCE_PATH)

    # ==========================================
    # ORDER MANAGEMENT
    # ==========================================

    def create_order(
        self,
        market: str,
        type: Union[OrderSide, str],
        amount: Any,
        price: Any,
    ) -> Any:
        """
        Place a limit order.

        Args:
            market: Market pair
            type: buy or sell
            amount: Order amount (pass strings or Decimal to keep precision)
            price: Limit price

        Returns:
            Created order
        """
        request = CreateOrderRequest(
            market=market,
            type=type,
            amount=amount,
            price=price,
        )
        logger.info(
            f"Creating {format_param_value(type)} order: "
            f"{amount} {market} @ {price}"
        )
        return self.private_post(self.CREATE_ORDER_PATH, request.to_params())

    def create_instant_order(
        self,
        market: str,
        type: Union[OrderSide, str],
        amount: Any,
    ) -> Any:
        """Place an order on the Instant Exchange."""
        request = InstantOrderRequest(market=market, type=type, amount=amount)
        logger.info(
            f"Creating instant {format_param_value(type)} order: {amount} {market}"
        )
        return self.private_post(
            self.CREATE_INSTANT_ORDER_PATH,
            request.to_params(),
        )

    def cancel_order(self, order_id: str) -> Any:
        """Cancel an order."""
        logger.info(f"Cancelling order {order_id}")
        return self.private_post(self.CANCEL_ORDER_PATH, {"id": order_id})

    # ==========================================
    # LIFECYCLE
    # ==========================================

    def close(self) -> None:
        """Release the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
