"""
Tests for the command-line entry point.

Tests cover:
- Argument parsing
- Command dispatch to the client
- Exit codes and JSON output
"""

import json
import logging
from unittest.mock import Mock, patch

import pytest

from cryptomkt.api import AuthenticationError, CryptoMktClient
from cryptomkt.main import main, parse_args, run_command


@pytest.fixture
def client():
    return Mock(spec=CryptoMktClient)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory without real credentials."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CRYPTOMKT_API_KEY", raising=False)
    monkeypatch.delenv("CRYPTOMKT_API_SECRET", raising=False)
    monkeypatch.delenv("CRYPTOMKT_BASE_URL", raising=False)

    root_logger = logging.getLogger()
    handlers, level = list(root_logger.handlers), root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_book_defaults(self):
        args = parse_args(["book", "ETHCLP", "buy"])
        assert args.command == "book"
        assert args.market == "ETHCLP"
        assert args.type == "buy"
        assert args.page == 1
        assert args.limit == 20

    def test_orders_page_starts_at_zero(self):
        args = parse_args(["active-orders", "ETHCLP"])
        assert args.page == 0

    def test_invalid_book_type_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["book", "ETHCLP", "hold"])
        assert exc_info.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRunCommand:
    """Tests for command dispatch."""

    def test_book(self, client):
        run_command(client, parse_args(["book", "ETHCLP", "sell", "--limit", "5"]))
        client.book.assert_called_once_with("ETHCLP", "sell", page=1, limit=5)

    def test_ticker(self, client):
        run_command(client, parse_args(["ticker", "--market", "ETHCLP"]))
        client.ticker.assert_called_once_with(market="ETHCLP")

    def test_trades(self, client):
        run_command(client, parse_args(["trades", "ETHCLP", "--start", "2018-01-01"]))
        client.trades.assert_called_once_with(
            "ETHCLP", start="2018-01-01", end=None, page=1, limit=20
        )

    def test_executed_orders(self, client):
        run_command(client, parse_args(["executed-orders", "ETHCLP", "--page", "2"]))
        client.executed_orders.assert_called_once_with("ETHCLP", page=2, limit=20)

    def test_order_status(self, client):
        run_command(client, parse_args(["order-status", "O1"]))
        client.order_status.assert_called_once_with("O1")

    def test_returns_client_result(self, client):
        client.market.return_value = ["ETHCLP"]
        assert run_command(client, parse_args(["market"])) == ["ETHCLP"]


class TestMain:
    """Tests for main()."""

    def test_prints_json(self, client, capsys):
        client.market.return_value = ["ETHCLP", "BTCCLP"]

        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            client_cls.from_config.return_value.__enter__.return_value = client
            code = main(["--log-level", "ERROR", "market"])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == ["ETHCLP", "BTCCLP"]
        assert client_cls.from_config.call_args.args[1] is None

    def test_private_command_without_credentials(self):
        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            code = main(["--log-level", "ERROR", "balance"])

        assert code == 1
        client_cls.from_config.assert_not_called()

    def test_private_command_passes_credentials(self, client, monkeypatch):
        monkeypatch.setenv("CRYPTOMKT_API_KEY", "key")
        monkeypatch.setenv("CRYPTOMKT_API_SECRET", "secret")
        client.balance.return_value = []

        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            client_cls.from_config.return_value.__enter__.return_value = client
            code = main(["--log-level", "ERROR", "balance"])

        credentials = client_cls.from_config.call_args.args[1]
        assert code == 0
        assert credentials.api_key == "key"
        assert credentials.api_secret == "secret"

    def test_api_error_exit_code(self, client):
        client.balance.side_effect = AuthenticationError("invalid_signature", status=401)

        with patch("cryptomkt.main.CryptoMktClient") as client_cls, \
                patch.dict('os.environ', {
                    'CRYPTOMKT_API_KEY': 'key',
                    'CRYPTOMKT_API_SECRET': 'secret',
                }):
            client_cls.from_config.return_value.__enter__.return_value = client
            code = main(["--log-level", "ERROR", "balance"])

        assert code == 1

    def test_invalid_config_override_exit_code(self, monkeypatch):
        monkeypatch.setenv("CRYPTOMKT_REQUEST_TIMEOUT", "abc")

        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            code = main(["--log-level", "ERROR", "market"])

        assert code == 1
        client_cls.from_config.assert_not_called()

    def test_credentials_file(self, client, tmp_path):
        path = tmp_path / "creds.txt"
        path.write_text("api_key=file-key\napi_secret=file-secret\n")
        client.balance.return_value = []

        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            client_cls.from_config.return_value.__enter__.return_value = client
            code = main([
                "--log-level", "ERROR",
                "--credentials-file", str(path),
                "balance",
            ])

        credentials = client_cls.from_config.call_args.args[1]
        assert code == 0
        assert credentials.api_key == "file-key"
        assert credentials.api_secret == "file-secret"

    def test_missing_credentials_file_exit_code(self, tmp_path):
        with patch("cryptomkt.main.CryptoMktClient") as client_cls:
            code = main([
                "--log-level", "ERROR",
                "--credentials-file", str(tmp_path / "missing.txt"),
                "balance",
            ])

        assert code == 1
        client_cls.from_config.assert_not_called()
