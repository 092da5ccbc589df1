"""Reward models — rates, pool policy, and the published reward breakdown.

All reward values are integers in the smallest reward unit (1e18 units
per whole reward token at the default rates). No floats in rewards.

Breakdown invariants:
- base_reward == time_reward + amount_reward + milestone_reward
  + cross_platform_reward
- reward == base_reward * boost_factor when a lockup is active,
  reward == base_reward otherwise (boost_factor is None)
- new_consecutive_days - previous_consecutive_days is 0 or 1
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class PoolReinitPolicy(str, enum.Enum):
    """What a second initialization of the same pool does."""
    OVERWRITE = "overwrite"
    REJECT = "reject"


@dataclass(frozen=True)
class RewardRates:
    """Scale constants for the five reward components.

    Defaults reproduce the reference behaviour:
        time_rate           1e18 per second held
        amount_rate         1e12 per unit of liquidity
        milestone_rate      10e18 per consecutive day reached
        cross_platform_rate 5e18 per cross-platform contribution
    """
    time_rate: int = 10**18
    amount_rate: int = 10**12
    milestone_rate: int = 10 * 10**18
    cross_platform_rate: int = 5 * 10**18
    day_seconds: int = 86_400
    max_reward_value: int = 2**256 - 1


@dataclass(frozen=True)
class RewardBreakdown:
    """Full breakdown of a single reward computation.

    Produced by RewardEngine.compute_rewards() without touching state,
    and committed by RewardEngine.apply_rewards().
    """
    provider_id: str
    pool_id: str
    computed_at: int
    window_start: int
    elapsed: int
    total_liquidity: int
    time_reward: int
    amount_reward: int
    milestone_reward: int
    cross_platform_reward: int
    base_reward: int
    boost_factor: Optional[int]
    reward: int
    previous_consecutive_days: int
    consecutive_days: int
    pool_total_after: int

    @property
    def milestone_reached(self) -> bool:
        return self.consecutive_days > self.previous_consecutive_days

    @property
    def lockup_applied(self) -> bool:
        return self.boost_factor is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "pool_id": self.pool_id,
            "computed_at": self.computed_at,
            "window_start": self.window_start,
            "elapsed": self.elapsed,
            "total_liquidity": self.total_liquidity,
            "time_reward": self.time_reward,
            "amount_reward": self.amount_reward,
            "milestone_reward": self.milestone_reward,
            "cross_platform_reward": self.cross_platform_reward,
            "base_reward": self.base_reward,
            "boost_factor": self.boost_factor,
            "reward": self.reward,
            "previous_consecutive_days": self.previous_consecutive_days,
            "consecutive_days": self.consecutive_days,
            "pool_total_after": self.pool_total_after,
        }
