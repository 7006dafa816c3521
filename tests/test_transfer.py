"""Tests for the in-memory asset ledger."""

import pytest

from prop_stake.exceptions import InvalidAmountError, TransferError
from prop_stake.models.enums import Asset
from prop_stake.transfer import POOL_ACCOUNT, InMemoryAssetLedger


@pytest.fixture
def ledger() -> InMemoryAssetLedger:
    ledger = InMemoryAssetLedger()
    ledger.mint(Asset.STAKE, "alice", 100)
    return ledger


class TestInMemoryAssetLedger:
    """Tests for InMemoryAssetLedger."""

    def test_mint(self, ledger: InMemoryAssetLedger) -> None:
        assert ledger.balance_of(Asset.STAKE, "alice") == 100
        assert ledger.balance_of(Asset.REWARD, "alice") == 0
        assert ledger.total_supply(Asset.STAKE) == 100

    def test_mint_rejects_non_positive(self, ledger: InMemoryAssetLedger) -> None:
        with pytest.raises(InvalidAmountError):
            ledger.mint(Asset.STAKE, "alice", 0)

    def test_transfer_in_credits_pool(self, ledger: InMemoryAssetLedger) -> None:
        ledger.transfer_in(Asset.STAKE, "alice", 40)

        assert ledger.balance_of(Asset.STAKE, "alice") == 60
        assert ledger.pool_balance(Asset.STAKE) == 40
        assert ledger.balance_of(Asset.STAKE, POOL_ACCOUNT) == 40

    def test_transfer_out_debits_pool(self, ledger: InMemoryAssetLedger) -> None:
        ledger.transfer_in(Asset.STAKE, "alice", 40)
        ledger.transfer_out(Asset.STAKE, "bob", 15)

        assert ledger.pool_balance(Asset.STAKE) == 25
        assert ledger.balance_of(Asset.STAKE, "bob") == 15

    def test_insufficient_balance_has_no_side_effect(self, ledger: InMemoryAssetLedger) -> None:
        with pytest.raises(TransferError, match="alice holds 100 STAKE"):
            ledger.transfer_in(Asset.STAKE, "alice", 101)

        assert ledger.balance_of(Asset.STAKE, "alice") == 100
        assert ledger.pool_balance(Asset.STAKE) == 0

    def test_empty_pool_cannot_pay(self, ledger: InMemoryAssetLedger) -> None:
        with pytest.raises(TransferError):
            ledger.transfer_out(Asset.REWARD, "alice", 1)

    def test_assets_are_separate(self, ledger: InMemoryAssetLedger) -> None:
        ledger.transfer_in(Asset.STAKE, "alice", 50)

        assert ledger.pool_balance(Asset.REWARD) == 0
        with pytest.raises(TransferError):
            ledger.transfer_out(Asset.REWARD, "alice", 10)

    def test_rejects_non_positive_transfer(self, ledger: InMemoryAssetLedger) -> None:
        with pytest.raises(TransferError):
            ledger.transfer_in(Asset.STAKE, "alice", 0)
