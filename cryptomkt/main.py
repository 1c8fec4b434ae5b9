#!/usr/bin/env python3
"""
CryptoMarket client - command-line entry point.

Usage:
    python -m cryptomkt.main market
    python -m cryptomkt.main ticker --market ETHCLP
    python -m cryptomkt.main book ETHCLP buy --limit 5
    python -m cryptomkt.main balance

Environment:
    CRYPTOMKT_API_KEY: CryptoMarket API key (required for private commands)
    CRYPTOMKT_API_SECRET: CryptoMarket API secret (required for private commands)
    CRYPTOMKT_BASE_URL: Override the API origin

Credentials may instead come from a file passed with --credentials-file
(api_key=... / api_secret=... lines, or a JSON object).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from cryptomkt.api import (
    CryptoMktAPIError,
    CryptoMktClient,
    CryptoMktCredentials,
    load_credentials_from_file,
)
from cryptomkt.utils.config_loader import ConfigLoader

PRIVATE_COMMANDS = {"balance", "active-orders", "executed-orders", "order-status"}


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the client.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for logging
    """
    console_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file_format = (
        "%(asctime)s [%(levelname)s] %(name)s "
        "(%(filename)s:%(lineno)d): %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    # Console output goes to stderr so stdout stays valid JSON
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter(console_format))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CryptoMarket REST API client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List markets
  python -m cryptomkt.main market

  # Order book, first 5 buy entries
  python -m cryptomkt.main book ETHCLP buy --limit 5

  # Wallet balances (needs CRYPTOMKT_API_KEY / CRYPTOMKT_API_SECRET)
  python -m cryptomkt.main balance
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration YAML file (default: config/config.yaml)",
    )

    parser.add_argument(
        "--credentials-file",
        type=str,
        default=None,
        help="Credentials file for private commands (default: environment)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, INFO)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (default: none, console only)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("market", help="List available markets")

    ticker = commands.add_parser("ticker", help="Show market tickers")
    ticker.add_argument("--market", default=None, help="Only this market")

    book = commands.add_parser("book", help="Show the order book")
    book.add_argument("market")
    book.add_argument("type", choices=["buy", "sell"])
    book.add_argument("--page", type=int, default=1)
    book.add_argument("--limit", type=int, default=20)

    trades = commands.add_parser("trades", help="Show executed trades")
    trades.add_argument("market")
    trades.add_argument("--start", default=None, help="YYYY-MM-DD (default: today)")
    trades.add_argument("--end", default=None, help="YYYY-MM-DD (default: today)")
    trades.add_argument("--page", type=int, default=1)
    trades.add_argument("--limit", type=int, default=20)

    commands.add_parser("balance", help="Show wallet balances")

    for name, help_text in (
        ("active-orders", "List active orders"),
        ("executed-orders", "List executed orders"),
    ):
        orders = commands.add_parser(name, help=help_text)
        orders.add_argument("market")
        orders.add_argument("--page", type=int, default=0)
        orders.add_argument("--limit", type=int, default=20)

    status = commands.add_parser("order-status", help="Show an order's status")
    status.add_argument("order_id")

    return parser.parse_args(argv)


def run_command(client: CryptoMktClient, args: argparse.Namespace) -> Any:
    """Dispatch a parsed command to the client."""
    if args.command == "market":
        return client.market()
    if args.command == "ticker":
        return client.ticker(market=args.market)
    if args.command == "book":
        return client.book(args.market, args.type, page=args.page, limit=args.limit)
    if args.command == "trades":
        return client.trades(
            args.market,
            start=args.start,
            end=args.end,
            page=args.page,
            limit=args.limit,
        )
    if args.command == "balance":
        return client.balance()
    if args.command == "active-orders":
        return client.active_orders(args.market, page=args.page, limit=args.limit)
    if args.command == "executed-orders":
        return client.executed_orders(args.market, page=args.page, limit=args.limit)
    if args.command == "order-status":
        return client.order_status(args.order_id)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = parse_args(argv)

    loader = ConfigLoader(args.config)
    try:
        config = loader.load()
    except ValueError as e:
        # Logging is not configured yet; the last-resort handler prints this
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        return 1

    setup_logging(
        args.log_level or config.logging.level,
        args.log_file or config.logging.file_path,
    )
    logger = logging.getLogger(__name__)

    credentials = None
    if args.command in PRIVATE_COMMANDS:
        try:
            if args.credentials_file:
                credentials = load_credentials_from_file(args.credentials_file)
            else:
                api_key, api_secret = loader.get_api_credentials()
                credentials = CryptoMktCredentials(api_key, api_secret)
        except (OSError, KeyError, ValueError) as e:
            logger.error(f"Configuration error: {e}")
            return 1

    try:
        with CryptoMktClient.from_config(config.api, credentials) as client:
            result = run_command(client, args)
    except CryptoMktAPIError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
