"""Pytest configuration and fixtures."""

import pytest

from prop_stake.clock import ManualClock
from prop_stake.config import StakingConfig
from prop_stake.engine import StakingEngine
from prop_stake.models.enums import Asset
from prop_stake.transfer import InMemoryAssetLedger

PERIOD = 1000
ADMIN = "admin"
INITIAL_BALANCE = 1_000_000


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def clock() -> ManualClock:
    """Clock starting at the epoch."""
    return ManualClock(0)


@pytest.fixture
def assets() -> InMemoryAssetLedger:
    """Asset ledger with two funded users and a funded administrator."""
    ledger = InMemoryAssetLedger()
    for user in ("alice", "bob"):
        ledger.mint(Asset.STAKE, user, INITIAL_BALANCE)
    ledger.mint(Asset.REWARD, ADMIN, INITIAL_BALANCE)
    return ledger


@pytest.fixture
def config() -> StakingConfig:
    """Staking rules with a short period."""
    return StakingConfig(staking_period=PERIOD, admin=ADMIN)


@pytest.fixture
def engine(assets: InMemoryAssetLedger, config: StakingConfig, clock: ManualClock) -> StakingEngine:
    """Fresh engine over the funded ledger."""
    return StakingEngine(assets, config=config, clock=clock)


@pytest.fixture
def funded_engine(engine: StakingEngine) -> StakingEngine:
    """Engine whose reward pool holds the administrator's reward asset."""
    engine.fund_reward_pool(ADMIN, INITIAL_BALANCE)
    return engine


@pytest.fixture
def property_id(funded_engine: StakingEngine) -> int:
    """A successful property paying 50% per period."""
    pid = funded_engine.add_property(ADMIN, 5000)
    funded_engine.update_property(ADMIN, pid, True, 5000)
    return pid
