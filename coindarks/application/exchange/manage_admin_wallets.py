"""
Use cases: Administer platform deposit/payout wallets.

Listing retries transient store failures with a cooldown; writes do
not retry. All operations require an ADMIN caller.
"""

import logging
from typing import Any

from coindarks.application.exchange.access import require_admin
from coindarks.application.exchange.dtos import (
    AdminWalletResult,
    CreateAdminWalletCommand,
    DeleteAdminWalletCommand,
    UpdateAdminWalletCommand,
)
from coindarks.domain.exchange.entities import AdminWallet, Caller
from coindarks.domain.exchange.errors import StoreUnavailableError
from coindarks.domain.exchange.ports import AdminWalletRepository
from coindarks.shared.retry import with_retries

logger = logging.getLogger(__name__)


def to_result(wallet: AdminWallet) -> AdminWalletResult:
    return AdminWalletResult(
        id=wallet.id,
        chain=wallet.chain,
        currency=wallet.currency,
        address=wallet.address,
        label=wallet.label,
        is_active=wallet.is_active,
        created_at=wallet.created_at,
    )


class ListAdminWalletsUseCase:
    """Returns every admin wallet, newest first."""

    def __init__(
        self,
        wallet_repo: AdminWalletRepository,
        attempts: int = 3,
        backoff_seconds: float = 1.0,
    ) -> None:
        self._wallet_repo = wallet_repo
        self._attempts = attempts
        self._backoff = backoff_seconds

    def execute(self, caller: Caller) -> list[AdminWalletResult]:
        require_admin(caller)
        wallets = with_retries(
            self._wallet_repo.list_all,
            attempts=self._attempts,
            backoff=self._backoff,
            retry_on=(StoreUnavailableError,),
        )
        return [to_result(w) for w in wallets]


class CreateAdminWalletUseCase:
    """Adds an active wallet for a settlement currency."""

    def __init__(self, wallet_repo: AdminWalletRepository) -> None:
        self._wallet_repo = wallet_repo

    def execute(self, command: CreateAdminWalletCommand) -> AdminWalletResult:
        require_admin(command.caller)
        wallet = self._wallet_repo.add(
            AdminWallet(
                chain=command.chain.strip(),
                currency=command.currency.strip().upper(),
                address=command.address.strip(),
                label=command.label,
                is_active=True,
            )
        )
        logger.info(
            "Admin wallet %s (%s) added by %s",
            wallet.id,
            wallet.currency,
            command.caller.user_id,
        )
        return to_result(wallet)


class UpdateAdminWalletUseCase:
    """Edits chain, currency, address, label or active flag of a wallet."""

    def __init__(self, wallet_repo: AdminWalletRepository) -> None:
        self._wallet_repo = wallet_repo

    def execute(self, command: UpdateAdminWalletCommand) -> AdminWalletResult:
        require_admin(command.caller)
        changes: dict[str, Any] = {}
        if command.chain is not None:
            changes["chain"] = command.chain.strip()
        if command.currency is not None:
            changes["currency"] = command.currency.strip().upper()
        if command.address is not None:
            changes["address"] = command.address.strip()
        if command.label is not None:
            changes["label"] = command.label
        if command.is_active is not None:
            changes["is_active"] = command.is_active

        wallet = self._wallet_repo.update(command.wallet_id, changes)
        logger.info(
            "Admin wallet %s updated by %s: %s",
            wallet.id,
            command.caller.user_id,
            sorted(changes),
        )
        return to_result(wallet)


class DeleteAdminWalletUseCase:
    """Removes a wallet."""

    def __init__(self, wallet_repo: AdminWalletRepository) -> None:
        self._wallet_repo = wallet_repo

    def execute(self, command: DeleteAdminWalletCommand) -> None:
        require_admin(command.caller)
        self._wallet_repo.delete(command.wallet_id)
        logger.info(
            "Admin wallet %s deleted by %s", command.wallet_id, command.caller.user_id
        )
