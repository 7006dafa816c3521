"""Asset transfer port and an in-memory reference ledger.

The engine never touches balances directly; it calls ``transfer_in`` to
move funds from a user into the pool and ``transfer_out`` to pay a user
from the pool. Implementations must either move the full amount or raise
``TransferError`` without side effects.
"""

from __future__ import annotations

from typing import Protocol

from prop_stake.exceptions import InvalidAmountError, TransferError
from prop_stake.logging import get_logger
from prop_stake.models.enums import Asset

logger = get_logger(__name__)

POOL_ACCOUNT = "__pool__"


class AssetTransferPort(Protocol):
    """Collaborator contract for moving stake and reward assets."""

    def transfer_in(self, asset: Asset, sender: str, amount: int) -> None: ...

    def transfer_out(self, asset: Asset, recipient: str, amount: int) -> None: ...

    def pool_balance(self, asset: Asset) -> int: ...


class InMemoryAssetLedger:
    """Balances for both assets, including the pool's holdings."""

    def __init__(self, pool_account: str = POOL_ACCOUNT) -> None:
        self.pool_account = pool_account
        self._balances: dict[Asset, dict[str, int]] = {asset: {} for asset in Asset}

    def balance_of(self, asset: Asset, account: str) -> int:
        return self._balances[asset].get(account, 0)

    def pool_balance(self, asset: Asset) -> int:
        return self.balance_of(asset, self.pool_account)

    def total_supply(self, asset: Asset) -> int:
        return sum(self._balances[asset].values())

    def mint(self, asset: Asset, account: str, amount: int) -> None:
        """Credit ``amount`` to ``account`` out of thin air (test funding)."""
        if amount <= 0:
            raise InvalidAmountError(f"Mint amount must be positive, got {amount}")
        book = self._balances[asset]
        book[account] = book.get(account, 0) + amount

    def transfer_in(self, asset: Asset, sender: str, amount: int) -> None:
        """Move ``amount`` of ``asset`` from ``sender`` into the pool."""
        self._move(asset, sender, self.pool_account, amount)

    def transfer_out(self, asset: Asset, recipient: str, amount: int) -> None:
        """Pay ``amount`` of ``asset`` from the pool to ``recipient``."""
        self._move(asset, self.pool_account, recipient, amount)

    def _move(self, asset: Asset, source: str, target: str, amount: int) -> None:
        if amount <= 0:
            raise TransferError(f"Transfer amount must be positive, got {amount}")
        book = self._balances[asset]
        available = book.get(source, 0)
        if available < amount:
            raise TransferError(
                f"{source} holds {available} {asset.value}, cannot transfer {amount}"
            )
        book[source] = available - amount
        book[target] = book.get(target, 0) + amount
        logger.debug("Moved %d %s from %s to %s", amount, asset.value, source, target)
