"""
Adapter: Order repository.

Implements OrderRepository port.
Each order is written with one INSERT; a clash on the order number
surfaces as OrderNumberConflictError so the caller can regenerate it.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from coindarks.domain.exchange.entities import (
    ZERO,
    Order,
    OrderStatus,
    OrderType,
)
from coindarks.domain.exchange.errors import (
    OrderCreationError,
    OrderNumberConflictError,
)
from coindarks.domain.exchange.ports import OrderRepository
from coindarks.infrastructure.exchange.database import orders, to_decimal

logger = logging.getLogger(__name__)


def _to_order(row: RowMapping) -> Order:
    return Order(
        id=UUID(row["id"]),
        order_number=row["order_number"],
        user_id=row["user_id"],
        type=OrderType(row["type"]),
        asset=row["asset"],
        amount_crypto=to_decimal(row["amount_crypto"]) or ZERO,
        amount_fiat=to_decimal(row["amount_fiat"]) or ZERO,
        fiat_currency=row["fiat_currency"],
        receiving_address=row["receiving_address"],
        status=OrderStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class OrderRepositoryAdapter(OrderRepository):
    """SQLAlchemy implementation of the order repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def insert(self, order: Order) -> Order:
        """Persist a new order.

        Raises:
            OrderNumberConflictError: If the order number already exists.
            OrderCreationError: On any other persistence failure.
        """
        values = {
            "id": str(order.id),
            "order_number": order.order_number,
            "user_id": order.user_id,
            "type": order.type.value,
            "asset": order.asset,
            "amount_crypto": order.amount_crypto,
            "amount_fiat": order.amount_fiat,
            "fiat_currency": order.fiat_currency,
            "receiving_address": order.receiving_address,
            "status": order.status.value,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(orders).values(**values))
        except IntegrityError as exc:
            if "order_number" in str(exc.orig):
                logger.warning("Order number collision on %s", order.order_number)
                raise OrderNumberConflictError(order.order_number) from exc
            logger.error("Order insert rejected: %s", type(exc.orig).__name__)
            raise OrderCreationError(type(exc.orig).__name__) from exc
        except SQLAlchemyError as exc:
            logger.error("Order insert failed: %s", type(exc).__name__)
            raise OrderCreationError(type(exc).__name__) from exc
        return order

    def get_by_number(self, order_number: str) -> Optional[Order]:
        query = select(orders).where(orders.c.order_number == order_number)
        with self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()
        return _to_order(row) if row is not None else None
