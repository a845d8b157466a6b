"""
Adapter: Admin wallet repository.

Implements AdminWalletRepository port.
Reads and writes the admin_wallets table.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine, RowMapping

from coindarks.domain.exchange.entities import AdminWallet
from coindarks.domain.exchange.errors import WalletNotFoundError
from coindarks.domain.exchange.ports import AdminWalletRepository
from coindarks.infrastructure.exchange.database import admin_wallets, store_errors

logger = logging.getLogger(__name__)


def _to_wallet(row: RowMapping) -> AdminWallet:
    return AdminWallet(
        id=UUID(row["id"]),
        chain=row["chain"],
        currency=row["currency"],
        address=row["address"],
        label=row["label"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


class AdminWalletRepositoryAdapter(AdminWalletRepository):
    """SQLAlchemy implementation of the admin wallet repository."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_all(self) -> list[AdminWallet]:
        query = select(admin_wallets).order_by(admin_wallets.c.created_at.desc())
        with store_errors(), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_to_wallet(row) for row in rows]

    def list_active(self, currency: str) -> list[AdminWallet]:
        """Return active wallets for a currency, oldest first.

        Args:
            currency: Upper-case settlement currency (asset or fiat code).
        """
        query = (
            select(admin_wallets)
            .where(admin_wallets.c.currency == currency)
            .where(admin_wallets.c.is_active.is_(True))
            .order_by(admin_wallets.c.created_at)
        )
        with store_errors(), self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_to_wallet(row) for row in rows]

    def add(self, wallet: AdminWallet) -> AdminWallet:
        created_at = wallet.created_at or datetime.now(timezone.utc)
        with store_errors(), self._engine.begin() as conn:
            conn.execute(
                insert(admin_wallets).values(
                    id=str(wallet.id),
                    chain=wallet.chain,
                    currency=wallet.currency,
                    address=wallet.address,
                    label=wallet.label,
                    is_active=wallet.is_active,
                    created_at=created_at,
                )
            )
        return self._get(wallet.id)

    def update(self, wallet_id: UUID, changes: dict[str, Any]) -> AdminWallet:
        if changes:
            with store_errors(), self._engine.begin() as conn:
                result = conn.execute(
                    update(admin_wallets)
                    .where(admin_wallets.c.id == str(wallet_id))
                    .values(**changes)
                )
            if result.rowcount == 0:
                raise WalletNotFoundError(str(wallet_id))
        return self._get(wallet_id)

    def delete(self, wallet_id: UUID) -> None:
        with store_errors(), self._engine.begin() as conn:
            result = conn.execute(
                delete(admin_wallets).where(admin_wallets.c.id == str(wallet_id))
            )
        if result.rowcount == 0:
            raise WalletNotFoundError(str(wallet_id))

    def _get(self, wallet_id: UUID) -> AdminWallet:
        query = select(admin_wallets).where(admin_wallets.c.id == str(wallet_id))
        with store_errors(), self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()
        if row is None:
            raise WalletNotFoundError(str(wallet_id))
        return _to_wallet(row)
