"""
CLI entry point for the exchange service.

Usage:
    # Serve the API
    python -m coindarks.cli serve --port 8000

    # Create missing tables
    python -m coindarks.cli init-db

    # Print the currently resolved rates
    python -m coindarks.cli rates
"""

import argparse
import logging
from typing import Optional

from coindarks.core.config import settings
from coindarks.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI application under uvicorn."""
    import uvicorn

    logger.info("Starting %s at http://%s:%d", settings.project_name, args.host, args.port)
    uvicorn.run("coindarks.main:app", host=args.host, port=args.port, reload=False)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the exchange tables on the configured database."""
    from coindarks.infrastructure.exchange.database import create_db_engine, create_schema

    engine = create_db_engine(args.database_url)
    try:
        create_schema(engine)
    finally:
        engine.dispose()


def cmd_rates(args: argparse.Namespace) -> None:
    """Resolve and print every configured pair."""
    from coindarks.application.exchange.get_exchange_rates import GetExchangeRatesUseCase
    from coindarks.interfaces.exchange.dependencies import (
        get_db_engine,
        get_price_feed,
        get_rate_resolver,
    )

    use_case = GetExchangeRatesUseCase(
        get_rate_resolver(engine=get_db_engine(), price_feed=get_price_feed())
    )
    results = use_case.execute()
    if not results:
        print("No trading pairs configured.")
        return
    for r in results:
        print(
            f"{r.pair:<12} {r.display_rate:>20} "
            f"buy {r.buy_margin_percent}% sell {r.sell_margin_percent}% "
            f"24h {r.percent_change_24h}%"
            f"{'' if r.is_automated else ' (manual)'}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CoinDarks Exchange CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    init_parser = subparsers.add_parser("init-db", help="Create missing tables")
    init_parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    init_parser.set_defaults(func=cmd_init_db)

    rates_parser = subparsers.add_parser("rates", help="Print resolved exchange rates")
    rates_parser.set_defaults(func=cmd_rates)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    configure_logging(level=settings.log_level)
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
