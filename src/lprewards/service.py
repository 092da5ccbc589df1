"""LP reward service — the notification surface of the reward engine.

This is the interface the upstream pool manager calls into. It wraps
the provider ledger, reward engine and pool accumulator:
- "before" notifications update raw liquidity balances in the ledger
- "after" notifications run compute-and-accrue in the reward engine
- pool initialization seeds the pool accumulator
- lockups and cross-platform contributions update provider records

Every mutating entry point first asks the injected authorizer whether
the caller is the designated event source. Every committed change is
recorded in the event log as an outbound notification.

All operations produce typed results. A failed operation changes no
state. Audit events are never silently dropped: if the event log
cannot be written, the operation fails and its mutation is undone.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from lprewards import __version__
from lprewards.errors import InvalidAmount, RewardEngineError, Unauthorized
from lprewards.models.provider import ProviderRecord
from lprewards.persistence.event_log import EventKind, EventLog, EventRecord
from lprewards.policy.resolver import PolicyResolver
from lprewards.rewards.engine import RewardEngine

logger = logging.getLogger(__name__)

Authorizer = Callable[[str], bool]


def sole_event_source(source_id: str) -> Authorizer:
    """Authorizer that accepts exactly one caller identity."""
    def _is_event_source(caller: str) -> bool:
        return caller == source_id
    return _is_event_source


@dataclass(frozen=True)
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class LiquidityRewardService:
    """Notification facade for the reward engine.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        service = LiquidityRewardService(
            resolver, authorizer=sole_event_source("pool_manager"),
        )

        # Around every liquidity mutation in the pool manager:
        service.notify_before_add("pool_manager", "lp_1", "pool_a", 500, now)
        service.notify_after_add("pool_manager", "lp_1", "pool_a", now)

        service.notify_before_remove("pool_manager", "lp_1", "pool_a", -200, now)
        result = service.notify_after_remove("pool_manager", "lp_1", "pool_a", now)
        result.data["reward"]

    Persistence (optional):
        service = LiquidityRewardService(resolver, authorizer, event_log=log)
        # Event IDs continue from the persisted log.
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        authorizer: Authorizer,
        event_log: Optional[EventLog] = None,
        engine: Optional[RewardEngine] = None,
    ) -> None:
        self._resolver = resolver
        self._authorizer = authorizer
        self._engine = engine if engine is not None else RewardEngine(resolver)
        self._event_log = event_log if event_log is not None else EventLog()
        # Initialize counter from persisted log to avoid ID collision on restart
        self._event_counter = self._event_log.count
        self._lock = threading.RLock()

    @property
    def engine(self) -> RewardEngine:
        return self._engine

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    # ------------------------------------------------------------------
    # Liquidity notifications
    # ------------------------------------------------------------------

    def notify_before_add(
        self,
        caller: str,
        provider_id: str,
        pool_id: str,
        liquidity_delta: int,
        now: int,
    ) -> ServiceResult:
        """Register liquidity about to be added to a pool."""
        with self._lock:
            try:
                self._require_event_source(caller)
                return self._change_liquidity(
                    provider_id, pool_id, liquidity_delta, now, removing=False,
                )
            except RewardEngineError as e:
                return self._reject("notify_before_add", e)

    def notify_after_add(
        self,
        caller: str,
        provider_id: str,
        pool_id: str,
        now: int,
    ) -> ServiceResult:
        """Compute and accrue rewards after liquidity was added."""
        return self._accrue("notify_after_add", caller, provider_id, pool_id, now)

    def notify_before_remove(
        self,
        caller: str,
        provider_id: str,
        pool_id: str,
        liquidity_delta: int,
        now: int,
    ) -> ServiceResult:
        """Register liquidity about to be removed from a pool.

        liquidity_delta is the signed delta of the removal and must be
        negative; its magnitude is removed from the provider's balance.
        """
        with self._lock:
            try:
                self._require_event_source(caller)
                if liquidity_delta >= 0:
                    raise InvalidAmount(
                        f"Removal delta must be negative, got {liquidity_delta}"
                    )
                return self._change_liquidity(
                    provider_id, pool_id, -liquidity_delta, now, removing=True,
                )
            except RewardEngineError as e:
                return self._reject("notify_before_remove", e)

    def notify_after_remove(
        self,
        caller: str,
        provider_id: str,
        pool_id: str,
        now: int,
    ) -> ServiceResult:
        """Compute and accrue rewards after liquidity was removed."""
        return self._accrue("notify_after_remove", caller, provider_id, pool_id, now)

    def notify_pool_initialized(
        self,
        caller: str,
        pool_id: str,
        starting_reward_value: int = 0,
        now: int = 0,
    ) -> ServiceResult:
        """Seed a pool's reward accumulator.

        now is only recorded on the emitted event.
        """
        with self._lock:
            pools = self._engine.pools
            try:
                self._require_event_source(caller)
                pools.check_initialize(pool_id, starting_reward_value)
            except RewardEngineError as e:
                return self._reject("notify_pool_initialized", e)

            reinitialized = pools.is_initialized(pool_id)
            err = self._record_event(
                EventKind.POOL_INITIALIZED,
                actor_id=pool_id,
                payload={
                    "pool_id": pool_id,
                    "starting_reward_value": starting_reward_value,
                    "reinitialized": reinitialized,
                },
                now=now,
            )
            if err:
                return ServiceResult(success=False, errors=[err])

            pools.initialize(pool_id, starting_reward_value)
            logger.info("Pool %s initialized at %d", pool_id, starting_reward_value)
            return ServiceResult(
                success=True,
                data={"pool_id": pool_id, "pool_rewards": starting_reward_value},
            )

    # ------------------------------------------------------------------
    # Provider commitments
    # ------------------------------------------------------------------

    def lock_liquidity(
        self,
        caller: str,
        provider_id: str,
        duration: int,
        now: int,
    ) -> ServiceResult:
        """Commit a provider to a lockup of the given duration (seconds).

        Allowed for the provider itself and for the event source.
        A new lockup replaces any existing one.
        """
        with self._lock:
            ledger = self._engine.ledger
            try:
                if caller != provider_id:
                    self._require_event_source(caller)
                snapshot = ledger.snapshot(provider_id)
                record = ledger.lock_liquidity(provider_id, duration, now)
            except RewardEngineError as e:
                return self._reject("lock_liquidity", e)

            err = self._record_event(
                EventKind.LIQUIDITY_LOCKED,
                actor_id=provider_id,
                payload={
                    "duration": duration,
                    "lockup_end_time": record.lockup_end_time,
                },
                now=now,
            )
            if err:
                ledger.restore(provider_id, snapshot)
                return ServiceResult(success=False, errors=[err])

            logger.info(
                "Provider %s locked liquidity until %d", provider_id, record.lockup_end_time,
            )
            return ServiceResult(
                success=True,
                data={
                    "provider_id": provider_id,
                    "lockup_end_time": record.lockup_end_time,
                },
            )

    def record_cross_platform_contribution(
        self,
        caller: str,
        provider_id: str,
        now: int,
    ) -> ServiceResult:
        """Credit one attested cross-platform contribution to a provider."""
        with self._lock:
            ledger = self._engine.ledger
            try:
                self._require_event_source(caller)
            except RewardEngineError as e:
                return self._reject("record_cross_platform_contribution", e)

            snapshot = ledger.snapshot(provider_id)
            record = ledger.record_cross_platform_contribution(provider_id)
            err = self._record_event(
                EventKind.CROSS_PLATFORM_CONTRIBUTION_RECORDED,
                actor_id=provider_id,
                payload={"contributions": record.cross_platform_contributions},
                now=now,
            )
            if err:
                ledger.restore(provider_id, snapshot)
                return ServiceResult(success=False, errors=[err])

            return ServiceResult(
                success=True,
                data={
                    "provider_id": provider_id,
                    "cross_platform_contributions": record.cross_platform_contributions,
                },
            )

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def get_provider(self, provider_id: str) -> Optional[ProviderRecord]:
        """Copy of a provider's record, or None if never seen."""
        with self._lock:
            return self._engine.ledger.snapshot(provider_id)

    def pool_rewards(self, pool_id: str) -> int:
        """Accumulated reward total for a pool."""
        with self._lock:
            return self._engine.pools.read(pool_id)

    def quote_rewards(self, provider_id: str, pool_id: str, now: int) -> ServiceResult:
        """What an after-notification at `now` would accrue. Changes nothing."""
        with self._lock:
            try:
                breakdown = self._engine.compute_rewards(provider_id, pool_id, now)
            except (RewardEngineError, ValueError) as e:
                return self._reject("quote_rewards", e)
            return ServiceResult(success=True, data=breakdown.to_dict())

    def status(self) -> dict[str, Any]:
        """Return engine-wide status summary."""
        with self._lock:
            ledger = self._engine.ledger
            pools = self._engine.pools
            return {
                "version": __version__,
                "providers": {
                    "total": ledger.count,
                    "total_liquidity": ledger.total_liquidity(),
                },
                "pools": {
                    "total": len(pools.pools()),
                    "rewards": pools.pools(),
                },
                "events": self._event_log.count,
                "policy": self._resolver.as_dict(),
            }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_event_source(self, caller: str) -> None:
        if not self._authorizer(caller):
            raise Unauthorized(f"Caller is not the designated event source: {caller}")

    def _change_liquidity(
        self,
        provider_id: str,
        pool_id: str,
        amount: int,
        now: int,
        removing: bool,
    ) -> ServiceResult:
        """Apply a ledger change and record its event; undo if the event fails.

        Must be called holding the lock. Ledger validation errors propagate.
        """
        ledger = self._engine.ledger
        snapshot = ledger.snapshot(provider_id)
        if removing:
            record = ledger.apply_liquidity_removed(provider_id, amount, now)
            kind = EventKind.LIQUIDITY_REMOVED
        else:
            record = ledger.apply_liquidity_added(provider_id, amount, now)
            kind = EventKind.LIQUIDITY_ADDED

        err = self._record_event(
            kind,
            actor_id=provider_id,
            payload={
                "pool_id": pool_id,
                "amount": amount,
                "total_liquidity": record.total_liquidity,
            },
            now=now,
        )
        if err:
            ledger.restore(provider_id, snapshot)
            return ServiceResult(success=False, errors=[err])

        return ServiceResult(
            success=True,
            data={
                "provider_id": provider_id,
                "pool_id": pool_id,
                "amount": amount,
                "total_liquidity": record.total_liquidity,
            },
        )

    def _accrue(
        self,
        operation: str,
        caller: str,
        provider_id: str,
        pool_id: str,
        now: int,
    ) -> ServiceResult:
        """Shared after-add / after-remove path.

        Three-step ordering ensures no phantom records:
        1. Compute the breakdown (pure, may fail on overflow).
        2. Record REWARDS_CALCULATED (fail closed on log failure).
        3. Commit the breakdown to ledger and pool.
        """
        with self._lock:
            try:
                self._require_event_source(caller)
                breakdown = self._engine.compute_rewards(provider_id, pool_id, now)
            except (RewardEngineError, ValueError) as e:
                return self._reject(operation, e)

            err = self._record_event(
                EventKind.REWARDS_CALCULATED,
                actor_id=provider_id,
                payload={
                    "pool_id": pool_id,
                    "reward": breakdown.reward,
                    "boost_factor": breakdown.boost_factor,
                    "consecutive_days": breakdown.consecutive_days,
                },
                now=now,
            )
            if err:
                return ServiceResult(success=False, errors=[err])

            self._engine.apply_rewards(breakdown)
            return ServiceResult(success=True, data=breakdown.to_dict())

    def _next_event_id(self) -> str:
        """The ID the next recorded event will take. Does not reserve it."""
        return f"EVT-{self._event_counter + 1:08d}"

    def _record_event(
        self,
        kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        now: int,
    ) -> Optional[str]:
        """Append an outbound notification. Returns error string or None."""
        try:
            event = EventRecord.create(
                event_id=self._next_event_id(),
                event_kind=kind,
                actor_id=actor_id,
                payload=payload,
                timestamp=now,
            )
            self._event_log.append(event)
        except (ValueError, OSError) as e:
            logger.error("Event log failure recording %s: %s", kind.value, e)
            return f"Event log failure: {e}"
        # Only a written event consumes an ID
        self._event_counter += 1
        return None

    def _reject(self, operation: str, error: Exception) -> ServiceResult:
        name = type(error).__name__
        logger.warning("%s rejected: %s: %s", operation, name, error)
        return ServiceResult(
            success=False,
            errors=[f"{name}: {error}"],
            data={"error": name},
        )
