"""
Tests for CryptoMarket API error handling.

Tests cover:
- HTTP status classification
- Error mapping to exception types
- Server message extraction
- Envelope parsing
"""

import json

import pytest

from cryptomkt.api.cryptomkt_errors import (
    AuthenticationError,
    CryptoMktAPIError,
    ErrorCategory,
    ErrorSeverity,
    InvalidRequestError,
    MalformedResponseError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TransportError,
    classify_status,
    extract_error_message,
    parse_envelope,
    raise_for_response,
)


class TestClassifyStatus:
    """Tests for status classification."""

    def test_unauthorized_is_critical_auth(self):
        info = classify_status(401)
        assert info.category == ErrorCategory.AUTHENTICATION
        assert info.severity == ErrorSeverity.CRITICAL

    def test_rate_limit(self):
        assert classify_status(429).category == ErrorCategory.RATE_LIMIT

    def test_server_range(self):
        info = classify_status(503)
        assert info.category == ErrorCategory.SERVER
        assert info.status == 503

    def test_other_client_error(self):
        assert classify_status(422).category == ErrorCategory.INVALID_REQUEST

    def test_none_is_unknown(self):
        assert classify_status(None).category == ErrorCategory.UNKNOWN


class TestRaiseForResponse:
    """Tests for raise_for_response error mapper."""

    def test_success_does_not_raise(self):
        raise_for_response(200, '{"status": "success", "data": []}')
        raise_for_response(204, "")

    @pytest.mark.parametrize("status,exc_class", [
        (400, InvalidRequestError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (404, NotFoundError),
        (429, RateLimitError),
        (500, ServerError),
        (502, ServerError),
    ])
    def test_status_maps_to_exception(self, status, exc_class):
        with pytest.raises(exc_class) as exc_info:
            raise_for_response(status, '{"status": "error", "message": "nope"}')

        assert exc_info.value.status == status
        assert exc_info.value.message == "nope"
        assert isinstance(exc_info.value, CryptoMktAPIError)

    def test_invalid_signature_message(self):
        """Test server rejection of a bad signature."""
        body = json.dumps({"status": "error", "message": "invalid_signature"})
        with pytest.raises(AuthenticationError, match="invalid_signature"):
            raise_for_response(401, body)

    def test_non_json_body_keeps_text(self):
        with pytest.raises(ServerError) as exc_info:
            raise_for_response(502, "<html>Bad Gateway</html>")

        assert exc_info.value.message == "<html>Bad Gateway</html>"
        assert exc_info.value.response == "<html>Bad Gateway</html>"

    def test_empty_body_uses_default_message(self):
        with pytest.raises(NotFoundError) as exc_info:
            raise_for_response(404, "")

        assert exc_info.value.message == "Resource not found"


class TestExtractErrorMessage:
    """Tests for server message extraction."""

    def test_message_field(self):
        assert extract_error_message('{"message": "bad market"}') == "bad market"

    def test_error_field(self):
        assert extract_error_message('{"error": "bad key"}') == "bad key"

    def test_string_data_field(self):
        assert extract_error_message('{"status": "error", "data": "oops"}') == "oops"

    def test_falls_back_to_raw(self):
        assert extract_error_message("  plain text ") == "plain text"


class TestParseEnvelope:
    """Tests for envelope unwrapping."""

    def test_returns_data_list(self):
        assert parse_envelope(200, '{"data": [1, 2, 3]}') == [1, 2, 3]

    def test_returns_data_object(self):
        body = '{"status": "success", "data": {"id": "M107441"}}'
        assert parse_envelope(200, body) == {"id": "M107441"}

    def test_null_data_is_returned(self):
        assert parse_envelope(200, '{"data": null}') is None

    def test_invalid_json_raises(self):
        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            parse_envelope(200, "not json")

    def test_missing_data_raises(self):
        with pytest.raises(MalformedResponseError, match="no data field"):
            parse_envelope(200, '{"status": "success"}')

    def test_non_object_raises(self):
        with pytest.raises(MalformedResponseError):
            parse_envelope(200, "[1, 2, 3]")

    def test_malformed_category(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_envelope(200, "")

        assert exc_info.value.category == ErrorCategory.MALFORMED_RESPONSE
        assert exc_info.value.severity == ErrorSeverity.HIGH


class TestTransportError:
    """Tests for TransportError."""

    def test_network_category(self):
        error = TransportError("Connection refused")
        assert error.category == ErrorCategory.NETWORK
        assert error.status is None
        assert "Connection refused" in str(error)
