"""
Adapter: Inventory repository.

Implements InventoryRepository port over the inventory table.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Engine, RowMapping

from coindarks.domain.exchange.entities import InventoryItem
from coindarks.domain.exchange.errors import InventoryItemNotFoundError
from coindarks.domain.exchange.ports import InventoryRepository
from coindarks.infrastructure.exchange.database import inventory, store_errors


def _to_item(row: RowMapping) -> InventoryItem:
    return InventoryItem(
        asset=row["asset"],
        buy_enabled=bool(row["buy_enabled"]),
        sell_enabled=bool(row["sell_enabled"]),
        updated_at=row["updated_at"],
    )


class InventoryRepositoryAdapter(InventoryRepository):
    """SQLAlchemy implementation of the inventory repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_all(self) -> list[InventoryItem]:
        query = select(inventory).order_by(inventory.c.asset)
        with store_errors(), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_to_item(row) for row in rows]

    def set_flags(
        self,
        asset: str,
        buy_enabled: Optional[bool] = None,
        sell_enabled: Optional[bool] = None,
    ) -> InventoryItem:
        changes: dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
        if buy_enabled is not None:
            changes["buy_enabled"] = buy_enabled
        if sell_enabled is not None:
            changes["sell_enabled"] = sell_enabled

        with store_errors(), self._engine.begin() as conn:
            result = conn.execute(
                update(inventory).where(inventory.c.asset == asset).values(**changes)
            )
            if result.rowcount == 0:
                raise InventoryItemNotFoundError(asset)
            row = conn.execute(
                select(inventory).where(inventory.c.asset == asset)
            ).mappings().one()
        return _to_item(row)
