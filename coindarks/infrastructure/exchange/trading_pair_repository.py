"""
Adapter: Trading pair repository.

Implements TradingPairRepository port.
Reads and writes the exchange_rates table.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import IntegrityError

from coindarks.domain.exchange.entities import ZERO, TradingPair
from coindarks.domain.exchange.errors import PairAlreadyExistsError, PairNotFoundError
from coindarks.domain.exchange.ports import TradingPairRepository
from coindarks.infrastructure.exchange.database import (
    exchange_rates,
    store_errors,
    to_decimal,
)

logger = logging.getLogger(__name__)


def _to_pair(row: RowMapping) -> TradingPair:
    return TradingPair(
        pair=row["pair"],
        rate=to_decimal(row["rate"]) or ZERO,
        manual_rate=to_decimal(row["manual_rate"]),
        margin_percent=to_decimal(row["margin_percent"]) or ZERO,
        buy_margin_percent=to_decimal(row["buy_margin_percent"]),
        sell_margin_percent=to_decimal(row["sell_margin_percent"]),
        is_automated=bool(row["is_automated"]),
        updated_at=row["updated_at"],
    )


class TradingPairRepositoryAdapter(TradingPairRepository):
    """SQLAlchemy implementation of the trading pair repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_all(self) -> list[TradingPair]:
        query = select(exchange_rates).order_by(exchange_rates.c.pair)
        with store_errors(), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_to_pair(row) for row in rows]

    def get(self, pair: str) -> Optional[TradingPair]:
        query = select(exchange_rates).where(exchange_rates.c.pair == pair)
        with store_errors(), self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()
        return _to_pair(row) if row is not None else None

    def add(self, pair: TradingPair) -> TradingPair:
        """Insert a new pair.

        Raises:
            PairAlreadyExistsError: If the pair name is taken.
        """
        values = {
            "pair": pair.pair,
            "rate": pair.rate,
            "manual_rate": pair.manual_rate,
            "margin_percent": pair.margin_percent,
            "buy_margin_percent": pair.buy_margin_percent,
            "sell_margin_percent": pair.sell_margin_percent,
            "is_automated": pair.is_automated,
            "updated_at": pair.updated_at or datetime.now(timezone.utc),
        }
        try:
            with store_errors(), self._engine.begin() as conn:
                conn.execute(insert(exchange_rates).values(**values))
        except IntegrityError as exc:
            raise PairAlreadyExistsError(pair.pair) from exc
        return self.get(pair.pair) or pair

    def update(self, pair: str, changes: dict[str, Any]) -> TradingPair:
        """Apply field changes to a pair.

        Raises:
            PairNotFoundError: If the pair is not configured.
        """
        statement = (
            update(exchange_rates)
            .where(exchange_rates.c.pair == pair)
            .values(**changes, updated_at=datetime.now(timezone.utc))
        )
        with store_errors(), self._engine.begin() as conn:
            result = conn.execute(statement)
        if result.rowcount == 0:
            raise PairNotFoundError(pair)
        stored = self.get(pair)
        if stored is None:
            raise PairNotFoundError(pair)
        return stored

    def delete(self, pair: str) -> None:
        """Remove a pair.

        Raises:
            PairNotFoundError: If the pair is not configured.
        """
        with store_errors(), self._engine.begin() as conn:
            result = conn.execute(
                delete(exchange_rates).where(exchange_rates.c.pair == pair)
            )
        if result.rowcount == 0:
            raise PairNotFoundError(pair)
