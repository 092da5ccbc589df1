"""Reward engine — computes and accrues LP rewards from five factors.

The reward formula is fully deterministic given a provider record and
the caller's timestamp:

    elapsed          = now - liquidity_start_time
    time_reward      = elapsed × TIME_RATE
    amount_reward    = total_liquidity × AMOUNT_RATE
    consecutive_days += 1   if elapsed >= DAY × (consecutive_days + 1)
    milestone_reward = consecutive_days × MILESTONE_RATE
    cross_reward     = cross_platform_contributions × CROSS_RATE
    base             = time + amount + milestone + cross

    reward = base × ((lockup_end_time - now) // DAY)   if now < lockup_end_time
    reward = base                                      otherwise

The accrued reward is added to the pool total and the accrual window
restarts at now.

Milestones advance by at most one day per computation. A provider whose
rewards are not computed for several days still gains a single day on
the next call. This matches the reference behaviour and is kept as is.

A lockup with less than one full day remaining gives a boost factor of
zero, which zeroes the whole reward for that computation.

Every product, sum and the new pool total are checked against the
configured maximum. On overflow nothing is written: the milestone
increment, pool accrual and window reset commit together or not at all.
"""

from __future__ import annotations

import logging
from typing import Optional

from lprewards.errors import ArithmeticOverflow
from lprewards.ledger.provider_ledger import ProviderLedger
from lprewards.models.provider import ProviderRecord
from lprewards.models.rewards import RewardBreakdown
from lprewards.policy.resolver import PolicyResolver
from lprewards.rewards.pool import PoolRewardAccumulator

logger = logging.getLogger(__name__)


class RewardEngine:
    """Computes the five-factor reward and accrues it to a pool.

    Usage:
        engine = RewardEngine(resolver)
        engine.ledger.apply_liquidity_added("lp_1", 500, now=0)
        breakdown = engine.compute_and_accrue("lp_1", "pool_a", now=86_400)
        breakdown.reward  # also added to engine.pools.read("pool_a")
    """

    def __init__(
        self,
        resolver: PolicyResolver,
        ledger: Optional[ProviderLedger] = None,
        pools: Optional[PoolRewardAccumulator] = None,
    ) -> None:
        self._resolver = resolver
        self._rates = resolver.reward_rates()
        self._ledger = ledger if ledger is not None else ProviderLedger()
        if pools is None:
            pools = PoolRewardAccumulator(
                max_value=self._rates.max_reward_value,
                reinit_policy=resolver.pool_reinit_policy(),
            )
        self._pools = pools

    @property
    def ledger(self) -> ProviderLedger:
        return self._ledger

    @property
    def pools(self) -> PoolRewardAccumulator:
        return self._pools

    def compute_and_accrue(self, provider_id: str, pool_id: str, now: int) -> RewardBreakdown:
        """Compute the provider's reward, accrue it to the pool, restart the window.

        Returns:
            The committed RewardBreakdown; breakdown.reward is the amount
            added to the pool.

        Raises:
            ArithmeticOverflow: If any intermediate value or the pool total
                exceeds the maximum. No state is changed.
            ValueError: If now precedes the provider's accrual window start.
        """
        breakdown = self.compute_rewards(provider_id, pool_id, now)
        self.apply_rewards(breakdown)
        return breakdown

    def compute_rewards(self, provider_id: str, pool_id: str, now: int) -> RewardBreakdown:
        """Compute the reward breakdown without changing any state.

        An unknown provider is treated as a zero-valued record and is not
        created.
        """
        record = self._ledger.peek(provider_id)
        if record is None:
            record = ProviderRecord(provider_id=provider_id)
        return self.quote(record, pool_id, now)

    def quote(self, record: ProviderRecord, pool_id: str, now: int) -> RewardBreakdown:
        """Run the formula against an arbitrary record. Pure."""
        rates = self._rates
        day = rates.day_seconds

        elapsed = now - record.liquidity_start_time
        if elapsed < 0:
            raise ValueError(
                f"Timestamp {now} precedes accrual window start "
                f"{record.liquidity_start_time} for provider {record.provider_id}"
            )

        time_reward = self._checked(elapsed * rates.time_rate)
        amount_reward = self._checked(record.total_liquidity * rates.amount_rate)

        consecutive_days = record.consecutive_days
        if elapsed >= day * (consecutive_days + 1):
            consecutive_days += 1
        milestone_reward = self._checked(consecutive_days * rates.milestone_rate)

        cross_reward = self._checked(
            record.cross_platform_contributions * rates.cross_platform_rate
        )

        base_reward = self._checked(time_reward + amount_reward)
        base_reward = self._checked(base_reward + milestone_reward)
        base_reward = self._checked(base_reward + cross_reward)

        boost_factor: Optional[int] = None
        if record.has_active_lockup(now):
            boost_factor = (record.lockup_end_time - now) // day
            reward = self._checked(base_reward * boost_factor)
        else:
            reward = base_reward

        pool_total_after = self._pools.read(pool_id) + reward
        if pool_total_after > self._rates.max_reward_value:
            raise ArithmeticOverflow(
                f"Pool {pool_id} total would exceed maximum after accruing {reward}"
            )

        return RewardBreakdown(
            provider_id=record.provider_id,
            pool_id=pool_id,
            computed_at=now,
            window_start=record.liquidity_start_time,
            elapsed=elapsed,
            total_liquidity=record.total_liquidity,
            time_reward=time_reward,
            amount_reward=amount_reward,
            milestone_reward=milestone_reward,
            cross_platform_reward=cross_reward,
            base_reward=base_reward,
            boost_factor=boost_factor,
            reward=reward,
            previous_consecutive_days=record.consecutive_days,
            consecutive_days=consecutive_days,
            pool_total_after=pool_total_after,
        )

    def apply_rewards(self, breakdown: RewardBreakdown) -> int:
        """Commit a breakdown from compute_rewards() and return the reward.

        Raises:
            ValueError: If the provider record changed since the breakdown
                was computed.
            ArithmeticOverflow: If the pool total changed and can no longer
                absorb the reward.
        """
        record = self._ledger.peek(breakdown.provider_id)
        current = record if record is not None else ProviderRecord(breakdown.provider_id)
        if (
            current.liquidity_start_time != breakdown.window_start
            or current.consecutive_days != breakdown.previous_consecutive_days
            or current.total_liquidity != breakdown.total_liquidity
        ):
            raise ValueError(
                f"Stale reward breakdown for provider {breakdown.provider_id}"
            )

        # Pool first: it is the only step that can still fail.
        self._pools.add(breakdown.pool_id, breakdown.reward)

        record = self._ledger.get(breakdown.provider_id)
        record.consecutive_days = breakdown.consecutive_days
        record.liquidity_start_time = breakdown.computed_at

        if breakdown.milestone_reached:
            logger.info(
                "Provider %s reached milestone day %d",
                breakdown.provider_id, breakdown.consecutive_days,
            )
        logger.info(
            "Accrued %d to pool %s for provider %s (boost=%s)",
            breakdown.reward, breakdown.pool_id, breakdown.provider_id,
            breakdown.boost_factor,
        )
        logger.debug("Reward breakdown: %s", breakdown.to_dict())
        return breakdown.reward

    def _checked(self, value: int) -> int:
        if value > self._rates.max_reward_value:
            raise ArithmeticOverflow(
                f"Reward value {value} exceeds maximum {self._rates.max_reward_value}"
            )
        return value
