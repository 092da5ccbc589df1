"""Provider record — the per-provider state the reward engine works from.

One record exists per liquidity provider. Records are created zero-valued
on first access and are never deleted; a provider that has withdrawn
everything simply carries total_liquidity == 0.

All times are integer unix timestamps (seconds). All amounts are integers.

Invariants enforced by the ledger:
- total_liquidity never goes negative.
- consecutive_days resets to 0 exactly when total_liquidity reaches 0
  on a removal, and nowhere else.
- cross_platform_contributions only ever increases.
- lockup_end_time == 0 means no lockup has been set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ProviderRecord:
    """Current reward state for a single liquidity provider."""
    provider_id: str
    total_liquidity: int = 0
    liquidity_start_time: int = 0
    consecutive_days: int = 0
    lockup_end_time: int = 0
    cross_platform_contributions: int = 0

    def has_active_lockup(self, now: int) -> bool:
        """Whether a lockup boost applies at the given time."""
        return now < self.lockup_end_time

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "total_liquidity": self.total_liquidity,
            "liquidity_start_time": self.liquidity_start_time,
            "consecutive_days": self.consecutive_days,
            "lockup_end_time": self.lockup_end_time,
            "cross_platform_contributions": self.cross_platform_contributions,
        }
