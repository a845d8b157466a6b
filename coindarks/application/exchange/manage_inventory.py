"""
Use cases: Read and toggle asset trading availability.

The pricing pipeline does not consult these flags; they drive what
the storefront offers.
"""

import logging

from coindarks.application.exchange.access import require_admin
from coindarks.application.exchange.dtos import InventoryResult, UpdateInventoryCommand
from coindarks.domain.exchange.entities import InventoryItem
from coindarks.domain.exchange.ports import InventoryRepository

logger = logging.getLogger(__name__)


def to_result(item: InventoryItem) -> InventoryResult:
    return InventoryResult(
        asset=item.asset,
        buy_enabled=item.buy_enabled,
        sell_enabled=item.sell_enabled,
        updated_at=item.updated_at,
    )


class GetInventoryUseCase:
    """Lists inventory rows ordered by asset."""

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def execute(self) -> list[InventoryResult]:
        return [to_result(i) for i in self._inventory_repo.list_all()]


class UpdateInventoryUseCase:
    """Toggles buy/sell availability of one asset (admin only)."""

    def __init__(self, inventory_repo: InventoryRepository) -> None:
        self._inventory_repo = inventory_repo

    def execute(self, command: UpdateInventoryCommand) -> InventoryResult:
        require_admin(command.caller)
        item = self._inventory_repo.set_flags(
            command.asset.strip().upper(),
            buy_enabled=command.buy_enabled,
            sell_enabled=command.sell_enabled,
        )
        logger.info(
            "Inventory %s set buy=%s sell=%s by %s",
            item.asset,
            item.buy_enabled,
            item.sell_enabled,
            command.caller.user_id,
        )
        return to_result(item)
