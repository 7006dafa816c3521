"""Randomised staking activity with conservation checks after every step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from prop_stake.clock import ManualClock
from prop_stake.config import SECONDS_PER_DAY, SimulationConfig, StakingConfig
from prop_stake.engine import EventSink, StakingEngine
from prop_stake.exceptions import StakingError
from prop_stake.generators.activity import Action, ActivityGenerator
from prop_stake.logging import get_logger
from prop_stake.models.enums import ActionType, Asset
from prop_stake.transfer import InMemoryAssetLedger

logger = get_logger(__name__)


@dataclass
class SimulationReport:
    """Outcome of a simulation run."""

    steps: int = 0
    succeeded: dict[str, int] = field(default_factory=dict)
    rejected: dict[str, int] = field(default_factory=dict)
    rewards_paid: int = 0
    violations: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.violations


class StakingSimulationScenario:
    """Drive a staking engine with generated activity.

    This scenario creates:
    - A set of properties, all but the last flagged successful
    - Users funded with the stake asset
    - A reward pool funded by the administrator
    - A stream of deposits, withdrawals, claims, pool top-ups, property
      updates and clock advances

    After every step the stake pool is reconciled against the ledger and
    against each user's net deposits.
    """

    def __init__(
        self,
        num_users: int = 10,
        num_properties: int = 3,
        steps: int = 500,
        step_seconds: int = SECONDS_PER_DAY,
        initial_balance: int = 1_000_000,
        reward_pool: int = 1_000_000,
        seed: int | None = None,
        staking: StakingConfig | None = None,
        sinks: Sequence[EventSink] | None = None,
    ) -> None:
        """Initialize the simulation.

        Parameters
        ----------
        num_users : int
            Number of synthetic users.
        num_properties : int
            Number of properties to create.
        steps : int
            Number of generated actions to replay.
        step_seconds : int
            Typical clock advance between actions.
        initial_balance : int
            Stake asset minted to every user.
        reward_pool : int
            Reward asset the administrator puts into the pool up front.
        seed : int | None
            Random seed for reproducibility.
        staking : StakingConfig | None
            Staking rules for the engine.
        sinks : Sequence[EventSink] | None
            Event sinks attached to the engine.
        """
        if num_users < 1 or num_properties < 1:
            raise ValueError("need at least one user and one property")
        self.num_users = num_users
        self.num_properties = num_properties
        self.steps = steps
        self.initial_balance = initial_balance
        self.reward_pool = reward_pool
        self.seed = seed

        self.staking = staking or StakingConfig()
        self.clock = ManualClock()
        self.assets = InMemoryAssetLedger()
        self.engine = StakingEngine(self.assets, config=self.staking, clock=self.clock, sinks=sinks)
        self._activity = ActivityGenerator(seed=seed, step_seconds=step_seconds)

        self.users: list[str] = []
        self.property_ids: list[int] = []
        self._net: dict[tuple[str, int], int] = {}
        self._reward_supply = 0

    @classmethod
    def from_config(
        cls,
        simulation: SimulationConfig,
        staking: StakingConfig | None = None,
        sinks: Sequence[EventSink] | None = None,
    ) -> "StakingSimulationScenario":
        return cls(
            num_users=simulation.num_users,
            num_properties=simulation.num_properties,
            steps=simulation.steps,
            step_seconds=simulation.step_seconds,
            initial_balance=simulation.initial_balance,
            reward_pool=simulation.reward_pool,
            seed=simulation.seed,
            staking=staking,
            sinks=sinks,
        )

    def run(self) -> SimulationReport:
        """Set up the world and replay the generated actions.

        Returns
        -------
        SimulationReport
            Outcome counts and any invariant violations found.
        """
        logger.info(
            "Starting staking simulation: %d users, %d properties, %d steps",
            self.num_users,
            self.num_properties,
            self.steps,
        )
        self._setup()

        report = SimulationReport()
        for action in self._activity.generate_batch(self.steps, self.users, self.property_ids):
            self._apply(action, report)
            report.steps += 1
            report.violations.extend(
                f"step {report.steps}: {v}" for v in self.check_invariants()
            )

        report.summary = self.engine.summary()
        logger.info(
            "Simulation complete: %d succeeded, %d rejected, %d violations",
            sum(report.succeeded.values()),
            sum(report.rejected.values()),
            len(report.violations),
        )
        return report

    def check_invariants(self) -> list[str]:
        """Return a description of every broken invariant (empty if none)."""
        violations = []
        pool_stake = self.assets.pool_balance(Asset.STAKE)
        total_staked = self.engine.ledger.total_staked()
        if pool_stake != total_staked:
            violations.append(f"pool holds {pool_stake} stake, ledger records {total_staked}")

        for (user, pid), stake in self.engine.ledger.stakes.items():
            net = self._net.get((user, pid), 0)
            if stake.amount != net:
                violations.append(f"{user}/{pid}: staked {stake.amount}, net deposits {net}")
            if stake.amount == 0 and (stake.deposited_at or stake.last_claim_at):
                violations.append(f"{user}/{pid}: empty position with non-zero timestamps")

        supply = self.assets.total_supply(Asset.REWARD)
        if supply != self._reward_supply:
            violations.append(f"reward supply changed from {self._reward_supply} to {supply}")
        return violations

    def _setup(self) -> None:
        admin = self.engine.admin
        self.users = self._activity.generate_users(self.num_users)
        for user in self.users:
            self.assets.mint(Asset.STAKE, user, self.initial_balance)

        for i in range(self.num_properties):
            rate = self._activity.rng.randint(100, 2000)
            pid = self.engine.add_property(admin, rate)
            if i < self.num_properties - 1:
                self.engine.update_property(admin, pid, True, rate)
            self.property_ids.append(pid)

        if self.reward_pool > 0:
            self.assets.mint(Asset.REWARD, admin, self.reward_pool)
            self.engine.fund_reward_pool(admin, self.reward_pool)
        self._reward_supply = self.assets.total_supply(Asset.REWARD)

    def _apply(self, action: Action, report: SimulationReport) -> None:
        name = action.action_type.value
        try:
            if action.action_type == ActionType.ADVANCE_TIME:
                self.clock.advance(action.seconds)
            elif action.action_type == ActionType.DEPOSIT:
                self.engine.deposit(action.user, action.property_id, action.amount)
                key = (action.user, action.property_id)
                self._net[key] = self._net.get(key, 0) + action.amount
            elif action.action_type == ActionType.WITHDRAW:
                self.engine.withdraw(action.user, action.property_id, action.amount)
                key = (action.user, action.property_id)
                self._net[key] = self._net.get(key, 0) - action.amount
            elif action.action_type == ActionType.CLAIM:
                report.rewards_paid += self.engine.claim_rewards(action.user, action.property_id)
            elif action.action_type == ActionType.FUND:
                self.engine.fund_reward_pool(action.user, action.amount)
            elif action.action_type == ActionType.UPDATE_PROPERTY:
                self.engine.update_property(
                    self.engine.admin,
                    action.property_id,
                    action.successful,
                    action.reward_rate_bps,
                )
        except StakingError as exc:
            error = type(exc).__name__
            report.rejected[error] = report.rejected.get(error, 0) + 1
            return
        report.succeeded[name] = report.succeeded.get(name, 0) + 1
