"""Pool reward accumulator — one monotonically increasing total per pool.

The accumulator is the running sum of every reward accrued against a
pool. The engine never subtracts from it. A pool's total is created
implicitly on first add (starting at zero) or seeded explicitly by a
pool-initialized notification.

Re-initialization policy (PoolReinitPolicy):
    OVERWRITE  a second initialize() replaces the value (reference behaviour)
    REJECT     a second initialize() raises AlreadyInitialized
"""

from __future__ import annotations

import logging

from lprewards.errors import AlreadyInitialized, ArithmeticOverflow, InvalidAmount
from lprewards.models.rewards import PoolReinitPolicy, RewardRates

logger = logging.getLogger(__name__)


class PoolRewardAccumulator:
    """Per-pool reward totals.

    Usage:
        pools = PoolRewardAccumulator()
        pools.initialize("pool_a", 0)
        pools.add("pool_a", reward)
        total = pools.read("pool_a")
    """

    def __init__(
        self,
        max_value: int = RewardRates.max_reward_value,
        reinit_policy: PoolReinitPolicy = PoolReinitPolicy.OVERWRITE,
    ) -> None:
        self._totals: dict[str, int] = {}
        self._initialized: set[str] = set()
        self._max_value = max_value
        self._reinit_policy = reinit_policy

    def initialize(self, pool_id: str, starting_value: int = 0) -> int:
        """Seed a pool's total.

        Raises:
            InvalidAmount: If starting_value is negative.
            ArithmeticOverflow: If starting_value exceeds the maximum.
            AlreadyInitialized: If the pool was initialized before and the
                policy is REJECT.
        """
        self.check_initialize(pool_id, starting_value)
        if pool_id in self._initialized:
            logger.warning(
                "Pool %s re-initialized: %d overwritten with %d",
                pool_id, self._totals.get(pool_id, 0), starting_value,
            )
        self._totals[pool_id] = starting_value
        self._initialized.add(pool_id)
        return starting_value

    def check_initialize(self, pool_id: str, starting_value: int) -> None:
        """Raise the error initialize() would raise, without changing anything."""
        if starting_value < 0:
            raise InvalidAmount(
                f"Pool starting value must be non-negative, got {starting_value}"
            )
        if starting_value > self._max_value:
            raise ArithmeticOverflow(
                f"Pool starting value {starting_value} exceeds maximum"
            )
        if pool_id in self._initialized and self._reinit_policy == PoolReinitPolicy.REJECT:
            raise AlreadyInitialized(f"Pool already initialized: {pool_id}")

    def add(self, pool_id: str, amount: int) -> int:
        """Add a reward to a pool's total and return the new total.

        Raises:
            InvalidAmount: If amount is negative.
            ArithmeticOverflow: If the new total would exceed the maximum.
        """
        if amount < 0:
            raise InvalidAmount(f"Pool rewards only increase, got {amount}")
        new_total = self.read(pool_id) + amount
        if new_total > self._max_value:
            raise ArithmeticOverflow(
                f"Pool {pool_id} total would exceed maximum after adding {amount}"
            )
        self._totals[pool_id] = new_total
        return new_total

    def read(self, pool_id: str) -> int:
        """Current total for a pool; zero if nothing has been written."""
        return self._totals.get(pool_id, 0)

    def headroom(self, pool_id: str) -> int:
        """How much more the pool can accrue before overflowing."""
        return self._max_value - self.read(pool_id)

    def is_initialized(self, pool_id: str) -> bool:
        return pool_id in self._initialized

    def pools(self) -> dict[str, int]:
        """Snapshot of every pool total."""
        return dict(self._totals)

    def total(self) -> int:
        return sum(self._totals.values())
