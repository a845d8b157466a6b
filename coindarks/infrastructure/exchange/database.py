"""
Relational schema and engine construction for the exchange context.

Tables are declared with SQLAlchemy Core so the same definitions serve
PostgreSQL in production and SQLite in development and tests.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from coindarks.domain.exchange.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

metadata = MetaData()

RATE_TYPE = Numeric(28, 10)

exchange_rates = Table(
    "exchange_rates",
    metadata,
    Column("pair", String(32), primary_key=True),
    Column("rate", RATE_TYPE, nullable=False, default=0),
    Column("manual_rate", RATE_TYPE, nullable=True),
    Column("margin_percent", Numeric(10, 4), nullable=False, default=0),
    Column("buy_margin_percent", Numeric(10, 4), nullable=True),
    Column("sell_margin_percent", Numeric(10, 4), nullable=True),
    Column("is_automated", Boolean, nullable=False, default=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

inventory = Table(
    "inventory",
    metadata,
    Column("asset", String(16), primary_key=True),
    Column("buy_enabled", Boolean, nullable=False, default=True),
    Column("sell_enabled", Boolean, nullable=False, default=True),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

admin_wallets = Table(
    "admin_wallets",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("chain", String(64), nullable=False),
    Column("currency", String(16), nullable=False, index=True),
    Column("address", String(512), nullable=False),
    Column("label", String(128), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=True),
)

orders = Table(
    "orders",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("order_number", String(32), nullable=False),
    Column("user_id", String(64), nullable=False, index=True),
    Column("type", String(8), nullable=False),
    Column("asset", String(16), nullable=False),
    Column("amount_crypto", Numeric(28, 8), nullable=False),
    Column("amount_fiat", Numeric(20, 2), nullable=False),
    Column("fiat_currency", String(8), nullable=False),
    Column("receiving_address", String(512), nullable=False),
    Column("status", String(16), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=True),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    UniqueConstraint("order_number", name="uq_orders_order_number"),
)


def create_db_engine(url: str) -> Engine:
    """Build a SQLAlchemy engine for ``url``.

    In-memory SQLite URLs share one connection so every session sees
    the same database.
    """
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def create_schema(engine: Engine) -> None:
    """Create any missing exchange tables."""
    metadata.create_all(engine)
    logger.info("Exchange schema ready on %s", engine.url.render_as_string())


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate connection-level failures into StoreUnavailableError."""
    try:
        yield
    except OperationalError as exc:
        logger.error("Store unavailable: %s", type(exc.orig).__name__)
        raise StoreUnavailableError(type(exc.orig).__name__) from exc


def to_decimal(value: Any) -> Optional[Decimal]:
    """Normalize a numeric column value to Decimal, keeping None."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
