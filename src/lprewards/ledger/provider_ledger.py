"""Provider ledger — one record per liquidity provider, no reward policy.

The ledger owns raw liquidity balances, lockups and cross-platform
contribution counters. It never computes rewards; the reward engine
reads and updates records through it.

Every mutator validates before it mutates. A raised error means the
record is exactly as it was before the call.

Record lifecycle:
    first access       → zero-valued record
    add (from zero)    → liquidity_start_time = now (fresh accrual window)
    remove (to zero)   → consecutive_days = 0
    lock               → lockup_end_time = now + duration (overwrites)
    cross-platform     → counter += 1 (never reset)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from lprewards.errors import InsufficientLiquidity, InvalidAmount, InvalidDuration
from lprewards.models.provider import ProviderRecord


class ProviderLedger:
    """In-memory store of provider records.

    Usage:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        ledger.lock_liquidity("lp_1", duration=10 * 86400, now=0)
        record = ledger.get("lp_1")
    """

    def __init__(self) -> None:
        self._records: dict[str, ProviderRecord] = {}

    def get(self, provider_id: str) -> ProviderRecord:
        """Return the provider's record, creating a zero-valued one if absent."""
        record = self._records.get(provider_id)
        if record is None:
            record = ProviderRecord(provider_id=provider_id)
            self._records[provider_id] = record
        return record

    def peek(self, provider_id: str) -> Optional[ProviderRecord]:
        """Return the provider's record without creating it."""
        return self._records.get(provider_id)

    def apply_liquidity_added(self, provider_id: str, amount: int, now: int) -> ProviderRecord:
        """Register added liquidity.

        A deposit into an empty position starts a fresh accrual window.

        Raises:
            InvalidAmount: If amount is not positive.
        """
        if amount <= 0:
            raise InvalidAmount(f"Liquidity added must be positive, got {amount}")
        record = self.get(provider_id)
        if record.total_liquidity == 0:
            record.liquidity_start_time = now
        record.total_liquidity += amount
        return record

    def apply_liquidity_removed(self, provider_id: str, amount: int, now: int) -> ProviderRecord:
        """Register removed liquidity.

        Withdrawing the whole position resets the consecutive-day count.
        The accrual window is left alone; the next reward computation
        resets it.

        Raises:
            InvalidAmount: If amount is not positive.
            InsufficientLiquidity: If amount exceeds the current balance.
        """
        if amount <= 0:
            raise InvalidAmount(f"Liquidity removed must be positive, got {amount}")
        record = self._records.get(provider_id)
        held = record.total_liquidity if record is not None else 0
        if record is None or amount > held:
            raise InsufficientLiquidity(
                f"Provider {provider_id} holds {held}, cannot remove {amount}"
            )
        record.total_liquidity -= amount
        if record.total_liquidity == 0:
            record.consecutive_days = 0
        return record

    def lock_liquidity(self, provider_id: str, duration: int, now: int) -> ProviderRecord:
        """Commit to a lockup ending at now + duration.

        Overwrites any existing lockup; lockups never stack or extend.

        Raises:
            InvalidDuration: If duration is not positive.
        """
        if duration <= 0:
            raise InvalidDuration(f"Lockup duration must be positive, got {duration}")
        record = self.get(provider_id)
        record.lockup_end_time = now + duration
        return record

    def record_cross_platform_contribution(self, provider_id: str) -> ProviderRecord:
        """Count one cross-platform contribution, regardless of liquidity."""
        record = self.get(provider_id)
        record.cross_platform_contributions += 1
        return record

    def snapshot(self, provider_id: str) -> Optional[ProviderRecord]:
        """Detached copy of a record, or None if the provider is unknown."""
        record = self._records.get(provider_id)
        return replace(record) if record is not None else None

    def restore(self, provider_id: str, snapshot: Optional[ProviderRecord]) -> None:
        """Put a record back to a snapshot taken with snapshot().

        A None snapshot means the provider did not exist; the record is dropped.
        """
        if snapshot is None:
            self._records.pop(provider_id, None)
        else:
            self._records[provider_id] = replace(snapshot)

    def providers(self) -> list[str]:
        return sorted(self._records)

    def total_liquidity(self) -> int:
        """Sum of liquidity across every provider."""
        return sum(r.total_liquidity for r in self._records.values())

    @property
    def count(self) -> int:
        return len(self._records)
