"""
Use cases: Administer trading pairs.

Create, reconfigure and delete rows of the exchange rate table.
All three require an ADMIN caller.
"""

import logging
import re
from decimal import Decimal
from typing import Any

from coindarks.application.exchange.access import require_admin
from coindarks.application.exchange.dtos import (
    CreateRatePairCommand,
    DeleteRatePairCommand,
    UpdateRatePairCommand,
)
from coindarks.domain.exchange.entities import TradingPair
from coindarks.domain.exchange.errors import InvalidPairError
from coindarks.domain.exchange.ports import TradingPairRepository

logger = logging.getLogger(__name__)

PAIR_PATTERN = re.compile(r"^[A-Z0-9]{2,10}-[A-Z0-9]{2,10}$")
DEFAULT_NEW_PAIR_MARGIN = Decimal("2")


def normalize_pair(pair: str) -> str:
    """Upper-case a pair name and check it is of the form BASE-QUOTE."""
    name = pair.strip().upper()
    if not PAIR_PATTERN.match(name):
        raise InvalidPairError(pair)
    return name


class CreateRatePairUseCase:
    """Adds a new automated pair with the default 2% margins."""

    def __init__(self, pair_repo: TradingPairRepository) -> None:
        self._pair_repo = pair_repo

    def execute(self, command: CreateRatePairCommand) -> TradingPair:
        require_admin(command.caller)
        name = normalize_pair(command.pair)
        created = self._pair_repo.add(
            TradingPair(
                pair=name,
                is_automated=True,
                buy_margin_percent=DEFAULT_NEW_PAIR_MARGIN,
                sell_margin_percent=DEFAULT_NEW_PAIR_MARGIN,
            )
        )
        logger.info("Pair %s added by %s", name, command.caller.user_id)
        return created


class UpdateRatePairUseCase:
    """Changes manual rate, margins or automation of a pair."""

    def __init__(self, pair_repo: TradingPairRepository) -> None:
        self._pair_repo = pair_repo

    def execute(self, command: UpdateRatePairCommand) -> TradingPair:
        require_admin(command.caller)
        name = normalize_pair(command.pair)
        changes: dict[str, Any] = {
            key: value
            for key, value in (
                ("manual_rate", command.manual_rate),
                ("buy_margin_percent", command.buy_margin_percent),
                ("sell_margin_percent", command.sell_margin_percent),
                ("is_automated", command.is_automated),
            )
            if value is not None
        }
        updated = self._pair_repo.update(name, changes)
        logger.info(
            "Pair %s updated by %s: %s",
            name,
            command.caller.user_id,
            sorted(changes),
        )
        return updated


class DeleteRatePairUseCase:
    """Removes a pair."""

    def __init__(self, pair_repo: TradingPairRepository) -> None:
        self._pair_repo = pair_repo

    def execute(self, command: DeleteRatePairCommand) -> None:
        require_admin(command.caller)
        name = normalize_pair(command.pair)
        self._pair_repo.delete(name)
        logger.info("Pair %s deleted by %s", name, command.caller.user_id)
