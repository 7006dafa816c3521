"""Tests for administrative engine operations and queries."""

import json
import logging
from unittest.mock import MagicMock

import pytest

from prop_stake.engine import StakingEngine
from prop_stake.exceptions import (
    InvalidAmountError,
    InvalidDurationError,
    InvalidParameterError,
    InvalidRateError,
    PropertyNotFoundError,
    SinkError,
    TransferError,
    UnauthorizedError,
)
from prop_stake.logging import JsonFormatter, record_context
from prop_stake.models.enums import Asset, EventType
from prop_stake.transfer import InMemoryAssetLedger

from tests.conftest import ADMIN, INITIAL_BALANCE, PERIOD


class TestAddProperty:
    """Tests for StakingEngine.add_property."""

    def test_sequential_ids(self, engine: StakingEngine) -> None:
        """N calls yield N distinct sequential ids starting at 1."""
        ids = [engine.add_property(ADMIN, 100 * i) for i in range(1, 8)]

        assert ids == list(range(1, 8))

    def test_new_property_state(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 300)
        prop = engine.get_property(pid)

        assert prop is not None
        assert prop.exists is True
        assert prop.successful is False
        assert prop.reward_rate_bps == 300

    def test_rate_not_validated(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 20_000)

        assert engine.get_property(pid).reward_rate_bps == 20_000

    def test_requires_admin(self, engine: StakingEngine) -> None:
        with pytest.raises(UnauthorizedError):
            engine.add_property("alice", 100)

        assert engine.registry.properties == {}
        assert engine.events == []

    def test_emits_created_event(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)
        event = engine.events[-1]

        assert event.event_type == EventType.PROPERTY_CREATED.value
        assert event.subject == str(pid)
        assert event.data == {"property_id": pid, "reward_rate_bps": 100}


class TestUpdateProperty:
    """Tests for StakingEngine.update_property."""

    def test_overwrites_flag_and_rate(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)
        engine.update_property(ADMIN, pid, True, 900)

        prop = engine.get_property(pid)
        assert prop.successful is True
        assert prop.reward_rate_bps == 900

    def test_unknown_property(self, engine: StakingEngine) -> None:
        with pytest.raises(PropertyNotFoundError):
            engine.update_property(ADMIN, 42, True, 100)

    def test_rate_above_bound(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)

        with pytest.raises(InvalidRateError):
            engine.update_property(ADMIN, pid, True, 10_001)

        assert engine.get_property(pid).successful is False

    @pytest.mark.parametrize("rate", [-1, -5000, 2.5, True])
    def test_rate_outside_range_leaves_property_unchanged(
        self, engine: StakingEngine, rate
    ) -> None:
        """Negative, fractional and boolean rates are refused."""
        pid = engine.add_property(ADMIN, 100)
        events_before = len(engine.events)

        with pytest.raises(InvalidRateError):
            engine.update_property(ADMIN, pid, True, rate)

        prop = engine.get_property(pid)
        assert prop.successful is False
        assert prop.reward_rate_bps == 100
        assert prop.updated_at is None
        assert len(engine.events) == events_before

    def test_rate_bounds_are_inclusive(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)

        engine.update_property(ADMIN, pid, True, 0)
        assert engine.get_property(pid).reward_rate_bps == 0
        engine.update_property(ADMIN, pid, True, 10_000)
        assert engine.get_property(pid).reward_rate_bps == 10_000

    def test_requires_admin(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)

        with pytest.raises(UnauthorizedError):
            engine.update_property("alice", pid, True, 100)

    def test_emits_updated_event(self, engine: StakingEngine) -> None:
        pid = engine.add_property(ADMIN, 100)
        engine.update_property(ADMIN, pid, True, 250)

        event = engine.events[-1]
        assert event.event_type == EventType.PROPERTY_UPDATED.value
        assert event.data == {"property_id": pid, "successful": True, "reward_rate_bps": 250}


class TestSetStakingPeriod:
    """Tests for StakingEngine.set_staking_period."""

    def test_initial_period_from_config(self, engine: StakingEngine) -> None:
        assert engine.staking_period == PERIOD

    def test_changes_period(self, engine: StakingEngine) -> None:
        engine.set_staking_period(ADMIN, 60)

        assert engine.staking_period == 60
        assert engine.events[-1].event_type == EventType.PERIOD_CHANGED.value
        assert engine.events[-1].data == {"previous": PERIOD, "duration": 60}

    @pytest.mark.parametrize("duration", [0, -5, 0.5, 3600.0, True, "60"])
    def test_rejects_non_positive_integer(self, engine: StakingEngine, duration) -> None:
        with pytest.raises(InvalidDurationError):
            engine.set_staking_period(ADMIN, duration)

        assert engine.staking_period == PERIOD

    def test_requires_admin(self, engine: StakingEngine) -> None:
        with pytest.raises(UnauthorizedError):
            engine.set_staking_period("bob", 60)


class TestTransferAdmin:
    """Tests for StakingEngine.transfer_admin."""

    def test_hands_over_capability(self, engine: StakingEngine) -> None:
        engine.transfer_admin(ADMIN, "carol")

        assert engine.admin == "carol"
        assert engine.is_admin("carol")
        assert engine.add_property("carol", 100) == 1
        with pytest.raises(UnauthorizedError):
            engine.add_property(ADMIN, 100)

    def test_requires_admin(self, engine: StakingEngine) -> None:
        with pytest.raises(UnauthorizedError):
            engine.transfer_admin("alice", "alice")

    def test_rejects_empty_identity(self, engine: StakingEngine) -> None:
        with pytest.raises(InvalidParameterError):
            engine.transfer_admin(ADMIN, "")

        assert engine.admin == ADMIN


class TestFundRewardPool:
    """Tests for StakingEngine.fund_reward_pool."""

    def test_moves_reward_into_pool(
        self, engine: StakingEngine, assets: InMemoryAssetLedger
    ) -> None:
        engine.fund_reward_pool(ADMIN, 5000)

        assert assets.pool_balance(Asset.REWARD) == 5000
        assert assets.balance_of(Asset.REWARD, ADMIN) == INITIAL_BALANCE - 5000
        assert engine.events[-1].event_type == EventType.POOL_FUNDED.value

    def test_any_caller_may_fund(self, engine: StakingEngine, assets: InMemoryAssetLedger) -> None:
        assets.mint(Asset.REWARD, "alice", 10)
        engine.fund_reward_pool("alice", 10)

        assert assets.pool_balance(Asset.REWARD) == 10

    @pytest.mark.parametrize("amount", [0, -10, 0.5, True, "10"])
    def test_rejects_non_positive_integer(
        self, engine: StakingEngine, assets: InMemoryAssetLedger, amount
    ) -> None:
        with pytest.raises(InvalidAmountError):
            engine.fund_reward_pool(ADMIN, amount)

        assert assets.pool_balance(Asset.REWARD) == 0
        assert assets.balance_of(Asset.REWARD, ADMIN) == INITIAL_BALANCE
        assert engine.events == []

    def test_unfunded_caller(self, engine: StakingEngine, assets: InMemoryAssetLedger) -> None:
        with pytest.raises(TransferError):
            engine.fund_reward_pool("alice", 10)

        assert assets.pool_balance(Asset.REWARD) == 0
        assert engine.events == []


class TestQueriesAndEvents:
    """Tests for read-only queries and event publishing."""

    def test_get_property_absent(self, engine: StakingEngine) -> None:
        assert engine.get_property(1) is None

    def test_get_stake_does_not_create_record(self, engine: StakingEngine) -> None:
        stake = engine.get_stake("alice", 1)

        assert stake.amount == 0
        assert engine.ledger.stakes == {}

    def test_summary(self, funded_engine: StakingEngine, property_id: int) -> None:
        funded_engine.deposit("alice", property_id, 100)
        summary = funded_engine.summary()

        assert summary["properties"] == 1
        assert summary["successful"] == 1
        assert summary["total_staked"] == 100
        assert summary["pool_stake"] == 100
        assert summary["pool_reward"] == INITIAL_BALANCE
        assert summary["staking_period"] == PERIOD

    def test_events_published_to_sinks(self, assets: InMemoryAssetLedger, config, clock) -> None:
        sink = MagicMock()
        engine = StakingEngine(assets, config=config, clock=clock, sinks=[sink])

        engine.add_property(ADMIN, 100)

        sink.write_event.assert_called_once_with(engine.events[0])

    def test_failed_sink_does_not_fail_operation(
        self, assets: InMemoryAssetLedger, config, clock
    ) -> None:
        sink = MagicMock()
        sink.write_event.side_effect = SinkError("broker down")
        engine = StakingEngine(assets, config=config, clock=clock, sinks=[sink])

        pid = engine.add_property(ADMIN, 100)

        assert pid == 1
        assert len(engine.events) == 1

    def test_event_time_follows_clock(self, engine: StakingEngine, clock) -> None:
        clock.set(86400)
        engine.add_property(ADMIN, 100)

        event = engine.events[-1]
        assert event.event_time.isoformat() == "1970-01-02T00:00:00+00:00"
        assert event.metadata == {"timestamp": 86400}
        assert event.source == "prop_stake.engine"

    def test_property_timestamps_follow_clock(self, engine: StakingEngine, clock) -> None:
        clock.set(86400)
        pid = engine.add_property(ADMIN, 100)
        created_event = engine.events[-1]
        clock.set(2 * 86400)
        engine.update_property(ADMIN, pid, True, 200)

        prop = engine.get_property(pid)
        assert prop.created_at == created_event.event_time
        assert prop.updated_at == engine.events[-1].event_time
        assert prop.updated_at.isoformat() == "1970-01-03T00:00:00+00:00"


class TestOperationLogging:
    """Tests for the context attached to engine log records."""

    def test_success_carries_operation_context(
        self, engine: StakingEngine, property_id: int, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="prop_stake.engine"):
            engine.deposit("alice", property_id, 100)

        record = caplog.records[-1]
        assert record_context(record) == {
            "operation": "deposit",
            "user": "alice",
            "property_id": property_id,
            "amount": 100,
        }

    def test_rejection_carries_operation_context(
        self, engine: StakingEngine, property_id: int, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="prop_stake.engine"):
            with pytest.raises(InvalidAmountError):
                engine.deposit("alice", property_id, 0.5)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record_context(record) == {
            "operation": "deposit",
            "error": "InvalidAmountError",
            "user": "alice",
            "property_id": property_id,
            "amount": 0.5,
        }

    def test_json_output_includes_context(
        self, engine: StakingEngine, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="prop_stake.engine"):
            with pytest.raises(UnauthorizedError):
                engine.set_staking_period("bob", 60)

        data = json.loads(JsonFormatter().format(caplog.records[-1]))
        assert data["operation"] == "set_staking_period"
        assert data["error"] == "UnauthorizedError"
        assert data["caller"] == "bob"
        assert data["duration"] == 60
        assert data["level"] == "WARNING"
