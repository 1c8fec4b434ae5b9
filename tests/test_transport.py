"""
Tests for the requests-based HTTP transport.

Tests cover:
- Request shape passed to the session
- Response conversion
- Network exception translation
- Session lifecycle
"""

from unittest.mock import Mock

import pytest
import requests

from cryptomkt.api.cryptomkt_errors import TransportError
from cryptomkt.api.transport import RequestsTransport, TransportResponse


def make_session(status=200, text='{"data": []}', headers=None):
    session = Mock(spec=requests.Session)
    session.headers = {}
    response = Mock()
    response.status_code = status
    response.text = text
    response.headers = headers or {"Content-Type": "application/json"}
    session.request.return_value = response
    return session


class TestRequestsTransport:
    """Tests for RequestsTransport."""

    def test_get_request_shape(self):
        session = make_session()
        transport = RequestsTransport(timeout=5, session=session)

        transport.execute(
            "GET",
            "https://api.cryptomkt.com/v1/book",
            {"X-MKT-APIKEY": "key"},
            query={"market": "ETHCLP"},
        )

        session.request.assert_called_once_with(
            "GET",
            "https://api.cryptomkt.com/v1/book",
            params={"market": "ETHCLP"},
            data=None,
            headers={"X-MKT-APIKEY": "key"},
            timeout=5,
        )

    def test_post_sends_body(self):
        session = make_session()
        transport = RequestsTransport(session=session)

        transport.execute(
            "POST",
            "https://api.cryptomkt.com/v1/orders/cancel",
            {},
            body="id=O123",
        )

        kwargs = session.request.call_args.kwargs
        assert kwargs["data"] == "id=O123"
        assert kwargs["params"] is None

    def test_response_conversion(self):
        session = make_session(status=401, text='{"message": "bad"}')
        transport = RequestsTransport(session=session)

        response = transport.execute("GET", "https://x/v1/balance", {})

        assert isinstance(response, TransportResponse)
        assert response.status == 401
        assert response.body == '{"message": "bad"}'
        assert response.headers["Content-Type"] == "application/json"

    def test_user_agent_set_on_session(self):
        session = make_session()
        RequestsTransport(session=session, user_agent="cryptomkt-test")
        assert session.headers["User-Agent"] == "cryptomkt-test"

    @pytest.mark.parametrize("exc", [
        requests.exceptions.Timeout("timed out"),
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.TooManyRedirects("loop"),
    ])
    def test_network_errors_translated(self, exc):
        session = make_session()
        session.request.side_effect = exc
        transport = RequestsTransport(session=session)

        with pytest.raises(TransportError) as exc_info:
            transport.execute("GET", "https://x/v1/market", {})

        assert exc_info.value.__cause__ is exc

    def test_close_closes_session(self):
        session = make_session()
        with RequestsTransport(session=session):
            pass
        session.close.assert_called_once()

    def test_default_session_mounts_adapter(self):
        transport = RequestsTransport(pool_maxsize=4)
        try:
            adapter = transport._session.get_adapter("https://api.cryptomkt.com")
            assert adapter._pool_maxsize == 4
            assert adapter.max_retries.total == 0
        finally:
            transport.close()
