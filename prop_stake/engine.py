"""Staking engine: deposits, time-locked withdrawals and period rewards.

Every user and administrator action enters through ``StakingEngine``. It
validates against the ``PropertyRegistry``, mutates the ``StakeLedger`` and
finally moves funds through the ``AssetTransferPort``. A transfer failure
rolls the ledger mutation back, so a rejected call leaves no trace.

The one exception is ``claim_rewards``: the reward checkpoint is advanced
before the pool solvency check, so a claim rejected with
``InsufficientPoolError`` forfeits the periods it would have paid.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Protocol, Sequence

from prop_stake.clock import SystemClock
from prop_stake.config import StakingConfig
from prop_stake.exceptions import (
    ExceedsLimitError,
    InsufficientBalanceError,
    InsufficientPoolError,
    InvalidAmountError,
    InvalidDurationError,
    InvalidParameterError,
    NoPeriodsElapsedError,
    NoRewardError,
    NoStakeError,
    NotSuccessfulError,
    PeriodNotElapsedError,
    ReentrancyError,
    SinkError,
    StakingError,
    UnauthorizedError,
)
from prop_stake.logging import get_logger, log_context
from prop_stake.models.base import Event
from prop_stake.models.enums import Asset, EventType
from prop_stake.models.property import Property
from prop_stake.models.stake import StakeInfo
from prop_stake.store.ledger import StakeLedger
from prop_stake.store.registry import PropertyRegistry
from prop_stake.transfer import AssetTransferPort

logger = get_logger(__name__)


class EventSink(Protocol):
    """Receiver of engine events.

    The engine only calls ``write_event``; callers that own the sinks use
    ``write_batch`` for end-of-run snapshots and ``close`` on shutdown.
    """

    def write_event(self, event: Event) -> None: ...

    def write_batch(self, name: str, records: list[dict[str, Any]]) -> None: ...

    def close(self) -> None: ...


def _require_quantity(value: Any, error: type[StakingError], label: str) -> int:
    """Return ``value`` if it is a positive int, else raise ``error``.

    ``bool`` is an ``int`` subclass and is refused explicitly.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise error(f"{label} must be a positive integer, got {value!r}")
    return value


class StakingEngine:
    """Orchestrates the property registry, stake ledger and asset transfers.

    Parameters
    ----------
    transfers : AssetTransferPort
        Ledger of the stake and reward assets.
    config : StakingConfig | None
        Staking rules; the administrator identity and the initial period
        are taken from here.
    clock : Callable[[], int] | None
        Returns the current time in whole seconds (default: wall clock).
    registry : PropertyRegistry | None
        Property catalog (a fresh one by default).
    ledger : StakeLedger | None
        Stake positions (a fresh one by default).
    sinks : Sequence[EventSink] | None
        Receivers of every successful operation's event.
    """

    SOURCE = "prop_stake.engine"

    def __init__(
        self,
        transfers: AssetTransferPort,
        config: StakingConfig | None = None,
        clock: Callable[[], int] | None = None,
        registry: PropertyRegistry | None = None,
        ledger: StakeLedger | None = None,
        sinks: Sequence[EventSink] | None = None,
    ) -> None:
        self.config = config or StakingConfig()
        self.transfers = transfers
        self.clock = clock or SystemClock()
        self.registry = registry if registry is not None else PropertyRegistry()
        self.ledger = ledger if ledger is not None else StakeLedger()
        self.sinks = list(sinks or [])
        self.events: list[Event] = []

        self._admin = self.config.admin
        self._staking_period = self.config.staking_period
        self._lock = threading.RLock()
        self._active: str | None = None

    # ------------------------------------------------------------------
    # Operation guard
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str, **context: Any) -> Iterator[None]:
        """Serialize operations and refuse nested entry.

        Other threads block on the lock until the running operation is done.
        The same thread re-entering (a transfer callback calling back into
        the engine) is rejected outright. ``context`` is attached to the
        rejection log record.
        """
        with self._lock:
            if self._active is not None:
                raise ReentrancyError(f"{name} called while {self._active} is in progress")
            self._active = name
            try:
                yield
            except StakingError as exc:
                logger.warning(
                    "%s rejected: %s: %s",
                    name,
                    type(exc).__name__,
                    exc,
                    extra=log_context(operation=name, error=type(exc).__name__, **context),
                )
                raise
            finally:
                self._active = None

    def is_admin(self, caller: str) -> bool:
        return caller == self._admin

    def _require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise UnauthorizedError(f"{caller} is not the administrator")

    @property
    def admin(self) -> str:
        return self._admin

    @property
    def staking_period(self) -> int:
        return self._staking_period

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_property(self, caller: str, reward_rate_bps: int) -> int:
        """Register a new property and return its id."""
        with self._operation("add_property", caller=caller, reward_rate_bps=reward_rate_bps):
            self._require_admin(caller)
            prop = self.registry.add_property(reward_rate_bps, created_at=self._timestamp())
            self._emit(
                EventType.PROPERTY_CREATED,
                subject=str(prop.property_id),
                data={"property_id": prop.property_id, "reward_rate_bps": reward_rate_bps},
            )
            logger.info(
                "Property %d created at %d bps",
                prop.property_id,
                reward_rate_bps,
                extra=log_context(operation="add_property", property_id=prop.property_id),
            )
            return prop.property_id

    def update_property(
        self, caller: str, property_id: int, successful: bool, reward_rate_bps: int
    ) -> None:
        """Overwrite a property's success flag and reward rate."""
        with self._operation(
            "update_property",
            caller=caller,
            property_id=property_id,
            successful=successful,
            reward_rate_bps=reward_rate_bps,
        ):
            self._require_admin(caller)
            self.registry.update_property(
                property_id, successful, reward_rate_bps, updated_at=self._timestamp()
            )
            self._emit(
                EventType.PROPERTY_UPDATED,
                subject=str(property_id),
                data={
                    "property_id": property_id,
                    "successful": successful,
                    "reward_rate_bps": reward_rate_bps,
                },
            )
            logger.info(
                "Property %d updated: successful=%s rate=%d bps",
                property_id,
                successful,
                reward_rate_bps,
                extra=log_context(operation="update_property", property_id=property_id),
            )

    def set_staking_period(self, caller: str, duration: int) -> None:
        """Change the lock and reward period for every position at once."""
        with self._operation("set_staking_period", caller=caller, duration=duration):
            self._require_admin(caller)
            _require_quantity(duration, InvalidDurationError, "Staking period")
            previous = self._staking_period
            self._staking_period = duration
            self._emit(
                EventType.PERIOD_CHANGED,
                subject="staking_period",
                data={"previous": previous, "duration": duration},
            )
            logger.info(
                "Staking period changed from %ds to %ds",
                previous,
                duration,
                extra=log_context(operation="set_staking_period", duration=duration),
            )

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        """Hand the administrator capability to another identity."""
        with self._operation("transfer_admin", caller=caller, new_admin=new_admin):
            self._require_admin(caller)
            if not new_admin:
                raise InvalidParameterError("New administrator must not be empty")
            self._admin = new_admin
            self._emit(
                EventType.ADMIN_TRANSFERRED,
                subject=new_admin,
                data={"previous": caller, "admin": new_admin},
            )
            logger.info(
                "Administrator changed from %s to %s",
                caller,
                new_admin,
                extra=log_context(operation="transfer_admin", admin=new_admin),
            )

    def fund_reward_pool(self, caller: str, amount: int) -> None:
        """Move reward asset from ``caller`` into the pool."""
        with self._operation("fund_reward_pool", caller=caller, amount=amount):
            _require_quantity(amount, InvalidAmountError, "Funding amount")
            self.transfers.transfer_in(Asset.REWARD, caller, amount)
            self._emit(
                EventType.POOL_FUNDED,
                subject=caller,
                data={"funder": caller, "amount": amount},
            )
            logger.info(
                "Reward pool funded with %d by %s",
                amount,
                caller,
                extra=log_context(operation="fund_reward_pool", caller=caller, amount=amount),
            )

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    def deposit(self, caller: str, property_id: int, amount: int) -> None:
        """Stake ``amount`` of the stake asset in a property.

        A first deposit leaves ``deposited_at`` at zero. Topping up an
        existing position restarts the lock window for the whole balance.
        """
        with self._operation("deposit", user=caller, property_id=property_id, amount=amount):
            self.registry.require(property_id)
            _require_quantity(amount, InvalidAmountError, "Deposit amount")

            now = self.clock()
            before = self.ledger.snapshot(caller, property_id)
            stake = self.ledger.get(caller, property_id)
            if stake.amount == 0:
                stake.last_claim_at = 0
            else:
                stake.deposited_at = now
            stake.amount += amount

            self._transfer_or_restore(
                caller, property_id, before, self.transfers.transfer_in, Asset.STAKE, amount
            )
            self._emit(
                EventType.DEPOSIT_MADE,
                subject=f"{caller}:{property_id}",
                data={"user": caller, "property_id": property_id, "amount": amount},
            )
            logger.info(
                "%s deposited %d into property %d",
                caller,
                amount,
                property_id,
                extra=log_context(
                    operation="deposit", user=caller, property_id=property_id, amount=amount
                ),
            )

    def withdraw(self, caller: str, property_id: int, amount: int) -> None:
        """Withdraw part of a stake once its lock window has elapsed.

        At most ``max_withdraw_percent`` of the current balance may leave per
        call. A partial withdrawal restarts the lock window; a full one
        clears the position.
        """
        with self._operation("withdraw", user=caller, property_id=property_id, amount=amount):
            self.registry.require(property_id)
            _require_quantity(amount, InvalidAmountError, "Withdrawal amount")

            current = self.ledger.peek(caller, property_id)
            if amount > current.amount:
                raise InsufficientBalanceError(
                    f"{caller} has {current.amount} staked in property {property_id}, "
                    f"cannot withdraw {amount}"
                )

            now = self.clock()
            unlock_at = current.deposited_at + self._staking_period
            if now < unlock_at:
                raise PeriodNotElapsedError(
                    f"Stake in property {property_id} is locked until {unlock_at}"
                )

            max_withdraw = self.max_withdrawable(current.amount)
            if amount > max_withdraw:
                raise ExceedsLimitError(
                    f"Withdrawal of {amount} exceeds the limit of {max_withdraw}"
                )

            before = self.ledger.snapshot(caller, property_id)
            stake = self.ledger.get(caller, property_id)
            stake.amount -= amount
            if stake.amount > 0:
                stake.deposited_at = now
            else:
                stake.reset()

            self._transfer_or_restore(
                caller, property_id, before, self.transfers.transfer_out, Asset.STAKE, amount
            )
            self._emit(
                EventType.WITHDRAWAL_MADE,
                subject=f"{caller}:{property_id}",
                data={"user": caller, "property_id": property_id, "amount": amount},
            )
            logger.info(
                "%s withdrew %d from property %d",
                caller,
                amount,
                property_id,
                extra=log_context(
                    operation="withdraw", user=caller, property_id=property_id, amount=amount
                ),
            )

    def claim_rewards(self, caller: str, property_id: int) -> int:
        """Pay every full period accrued since the last checkpoint.

        Returns
        -------
        int
            Reward asset paid out.
        """
        with self._operation("claim_rewards", user=caller, property_id=property_id):
            prop = self.registry.require(property_id)
            if not prop.successful:
                raise NotSuccessfulError(f"Property {property_id} is not successful")

            current = self.ledger.peek(caller, property_id)
            if current.amount == 0:
                raise NoStakeError(f"{caller} has no stake in property {property_id}")

            now = self.clock()
            periods, total = self._accrued(prop, current, now)

            before = self.ledger.snapshot(caller, property_id)
            stake = self.ledger.get(caller, property_id)
            stake.last_claim_at += periods * self._staking_period

            # Checkpoint stays advanced when the pool is short.
            available = self.transfers.pool_balance(Asset.REWARD)
            if available < total:
                raise InsufficientPoolError(
                    f"Reward pool holds {available}, claim requires {total}"
                )

            self._transfer_or_restore(
                caller, property_id, before, self.transfers.transfer_out, Asset.REWARD, total
            )
            self._emit(
                EventType.REWARD_CLAIMED,
                subject=f"{caller}:{property_id}",
                data={
                    "user": caller,
                    "property_id": property_id,
                    "amount": total,
                    "periods": periods,
                },
            )
            logger.info(
                "%s claimed %d for %d period(s) on property %d",
                caller,
                total,
                periods,
                property_id,
                extra=log_context(
                    operation="claim_rewards",
                    user=caller,
                    property_id=property_id,
                    amount=total,
                    periods=periods,
                ),
            )
            return total

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_property(self, property_id: int) -> Property | None:
        with self._lock:
            return self.registry.get(property_id)

    def get_stake(self, user: str, property_id: int) -> StakeInfo:
        """Return a copy of the user's position (zero-valued if never used)."""
        with self._lock:
            return self.ledger.peek(user, property_id)

    def max_withdrawable(self, amount: int) -> int:
        return amount * self.config.max_withdraw_percent // 100

    def pending_rewards(self, user: str, property_id: int) -> int:
        """Reward a claim would pay right now, or 0 if it would be rejected.

        Pool solvency is not taken into account.
        """
        with self._lock:
            prop = self.registry.get(property_id)
            if prop is None or not prop.successful:
                return 0
            stake = self.ledger.peek(user, property_id)
            if stake.amount == 0:
                return 0
            try:
                _, total = self._accrued(prop, stake, self.clock())
            except (PeriodNotElapsedError, NoRewardError):
                return 0
            return total

    def summary(self) -> dict[str, Any]:
        """Return summary counts and pool balances."""
        with self._lock:
            return {
                **self.registry.summary(),
                **self.ledger.summary(),
                "staking_period": self._staking_period,
                "pool_stake": self.transfers.pool_balance(Asset.STAKE),
                "pool_reward": self.transfers.pool_balance(Asset.REWARD),
                "events": len(self.events),
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accrued(self, prop: Property, stake: StakeInfo, now: int) -> tuple[int, int]:
        """Return ``(periods, total)`` accrued since the last checkpoint."""
        period = self._staking_period
        elapsed = now - stake.last_claim_at
        if elapsed < period:
            raise PeriodNotElapsedError(
                f"Next reward accrues at {stake.last_claim_at + period}, now is {now}"
            )
        periods = elapsed // period
        if periods == 0:
            raise NoPeriodsElapsedError("No full staking period has elapsed")
        reward_per_period = stake.amount * prop.reward_rate_bps // self.config.bps_denominator
        total = reward_per_period * periods
        if total == 0:
            raise NoRewardError(
                f"Stake of {stake.amount} at {prop.reward_rate_bps} bps earns nothing"
            )
        return periods, total

    def _transfer_or_restore(
        self,
        user: str,
        property_id: int,
        before: StakeInfo | None,
        transfer: Callable[[Asset, str, int], None],
        asset: Asset,
        amount: int,
    ) -> None:
        try:
            transfer(asset, user, amount)
        except Exception:
            self.ledger.restore(user, property_id, before)
            raise

    def _timestamp(self, now: int | None = None) -> datetime:
        """Engine clock reading as an aware UTC datetime."""
        return datetime.fromtimestamp(self.clock() if now is None else now, tz=timezone.utc)

    def _emit(self, event_type: EventType, subject: str, data: dict[str, Any]) -> Event:
        now = self.clock()
        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type.value,
            event_time=self._timestamp(now),
            source=self.SOURCE,
            subject=subject,
            data=data,
            metadata={"timestamp": now},
        )
        self.events.append(event)
        for sink in self.sinks:
            try:
                sink.write_event(event)
            except SinkError:
                logger.exception("Sink %s failed to publish %s", type(sink).__name__, event.event_type)
        return event
