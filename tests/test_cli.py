"""
Tests for the operations CLI.

Only commands that need no network are exercised.
"""

import pytest
from sqlalchemy import create_engine, inspect

from coindarks.cli import build_parser, main


class TestCli:
    """Tests for argument parsing and the init-db command."""

    def test_init_db_creates_tables(self, tmp_path) -> None:
        url = f"sqlite:///{tmp_path / 'exchange.db'}"

        main(["init-db", "--database-url", url])

        engine = create_engine(url)
        try:
            tables = set(inspect(engine).get_table_names())
        finally:
            engine.dispose()
        assert {"exchange_rates", "inventory", "admin_wallets", "orders"} <= tables

    def test_serve_defaults(self) -> None:
        args = build_parser().parse_args(["serve"])

        assert args.port == 8000
        assert args.host == "0.0.0.0"

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
