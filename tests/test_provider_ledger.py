"""Tests for the provider ledger — proves record lifecycle invariants hold."""

import pytest

from lprewards.errors import InsufficientLiquidity, InvalidAmount, InvalidDuration
from lprewards.ledger.provider_ledger import ProviderLedger


DAY = 86_400


class TestRecordCreation:
    def test_get_creates_zero_record(self) -> None:
        ledger = ProviderLedger()
        record = ledger.get("lp_1")
        assert record.provider_id == "lp_1"
        assert record.total_liquidity == 0
        assert record.liquidity_start_time == 0
        assert record.consecutive_days == 0
        assert record.lockup_end_time == 0
        assert record.cross_platform_contributions == 0
        assert ledger.count == 1

    def test_get_returns_same_record(self) -> None:
        ledger = ProviderLedger()
        assert ledger.get("lp_1") is ledger.get("lp_1")

    def test_peek_does_not_create(self) -> None:
        ledger = ProviderLedger()
        assert ledger.peek("lp_1") is None
        assert ledger.count == 0


class TestLiquidityAdded:
    def test_first_add_starts_window(self) -> None:
        """Scenario A: 500 added at t=0 on a fresh record."""
        ledger = ProviderLedger()
        record = ledger.apply_liquidity_added("lp_1", 500, now=0)
        assert record.liquidity_start_time == 0
        assert record.total_liquidity == 500

    def test_add_to_empty_position_resets_window(self) -> None:
        ledger = ProviderLedger()
        record = ledger.apply_liquidity_added("lp_1", 100, now=5 * DAY)
        assert record.liquidity_start_time == 5 * DAY

    def test_add_to_held_position_keeps_window(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 100, now=10)
        record = ledger.apply_liquidity_added("lp_1", 50, now=DAY)
        assert record.liquidity_start_time == 10
        assert record.total_liquidity == 150

    @pytest.mark.parametrize("amount", [0, -1])
    def test_rejects_non_positive(self, amount: int) -> None:
        ledger = ProviderLedger()
        with pytest.raises(InvalidAmount, match="positive"):
            ledger.apply_liquidity_added("lp_1", amount, now=0)
        assert ledger.peek("lp_1") is None

    def test_invalid_amount_is_value_error(self) -> None:
        ledger = ProviderLedger()
        with pytest.raises(ValueError):
            ledger.apply_liquidity_added("lp_1", 0, now=0)


class TestLiquidityRemoved:
    def test_partial_remove(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        ledger.get("lp_1").consecutive_days = 3
        record = ledger.apply_liquidity_removed("lp_1", 200, now=DAY)
        assert record.total_liquidity == 300
        assert record.consecutive_days == 3

    def test_remove_to_zero_resets_days(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        ledger.get("lp_1").consecutive_days = 3
        record = ledger.apply_liquidity_removed("lp_1", 500, now=DAY)
        assert record.total_liquidity == 0
        assert record.consecutive_days == 0

    def test_remove_to_zero_keeps_window_start(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=7)
        record = ledger.apply_liquidity_removed("lp_1", 500, now=DAY)
        assert record.liquidity_start_time == 7

    def test_over_remove_fails_and_leaves_state(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        ledger.get("lp_1").consecutive_days = 2
        with pytest.raises(InsufficientLiquidity):
            ledger.apply_liquidity_removed("lp_1", 501, now=DAY)
        record = ledger.get("lp_1")
        assert record.total_liquidity == 500
        assert record.consecutive_days == 2

    def test_remove_from_unknown_provider(self) -> None:
        ledger = ProviderLedger()
        with pytest.raises(InsufficientLiquidity):
            ledger.apply_liquidity_removed("ghost", 1, now=0)
        assert ledger.peek("ghost") is None

    @pytest.mark.parametrize("amount", [0, -5])
    def test_rejects_non_positive(self, amount: int) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        with pytest.raises(InvalidAmount):
            ledger.apply_liquidity_removed("lp_1", amount, now=0)
        assert ledger.get("lp_1").total_liquidity == 500

    def test_balance_never_negative_over_sequence(self) -> None:
        ledger = ProviderLedger()
        ops = [("add", 100), ("remove", 40), ("remove", 70), ("add", 10), ("remove", 70)]
        for op, amount in ops:
            try:
                if op == "add":
                    ledger.apply_liquidity_added("lp_1", amount, now=0)
                else:
                    ledger.apply_liquidity_removed("lp_1", amount, now=0)
            except InsufficientLiquidity:
                pass
            assert ledger.get("lp_1").total_liquidity >= 0
        assert ledger.get("lp_1").total_liquidity == 0


class TestLockup:
    def test_lock_sets_end_time(self) -> None:
        ledger = ProviderLedger()
        record = ledger.lock_liquidity("lp_1", 10 * DAY, now=100)
        assert record.lockup_end_time == 100 + 10 * DAY

    def test_lock_overwrites_rather_than_extends(self) -> None:
        ledger = ProviderLedger()
        ledger.lock_liquidity("lp_1", 10 * DAY, now=0)
        record = ledger.lock_liquidity("lp_1", 2 * DAY, now=DAY)
        assert record.lockup_end_time == 3 * DAY

    @pytest.mark.parametrize("duration", [0, -DAY])
    def test_rejects_non_positive_duration(self, duration: int) -> None:
        ledger = ProviderLedger()
        with pytest.raises(InvalidDuration):
            ledger.lock_liquidity("lp_1", duration, now=0)

    def test_active_lockup_window(self) -> None:
        ledger = ProviderLedger()
        record = ledger.lock_liquidity("lp_1", DAY, now=0)
        assert record.has_active_lockup(DAY - 1)
        assert not record.has_active_lockup(DAY)


class TestCrossPlatformContributions:
    def test_increments_without_liquidity(self) -> None:
        ledger = ProviderLedger()
        ledger.record_cross_platform_contribution("lp_1")
        record = ledger.record_cross_platform_contribution("lp_1")
        assert record.cross_platform_contributions == 2
        assert record.total_liquidity == 0

    def test_never_reset_by_liquidity_changes(self) -> None:
        ledger = ProviderLedger()
        ledger.record_cross_platform_contribution("lp_1")
        ledger.apply_liquidity_added("lp_1", 10, now=0)
        ledger.apply_liquidity_removed("lp_1", 10, now=DAY)
        ledger.apply_liquidity_added("lp_1", 10, now=2 * DAY)
        assert ledger.get("lp_1").cross_platform_contributions == 1


class TestSnapshots:
    def test_snapshot_is_detached(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        snap = ledger.snapshot("lp_1")
        ledger.apply_liquidity_added("lp_1", 100, now=1)
        assert snap.total_liquidity == 500

    def test_restore_round_trip(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        snap = ledger.snapshot("lp_1")
        ledger.apply_liquidity_removed("lp_1", 500, now=1)
        ledger.restore("lp_1", snap)
        assert ledger.get("lp_1").total_liquidity == 500

    def test_restore_none_drops_record(self) -> None:
        ledger = ProviderLedger()
        snap = ledger.snapshot("lp_1")
        ledger.apply_liquidity_added("lp_1", 500, now=0)
        ledger.restore("lp_1", snap)
        assert ledger.peek("lp_1") is None

    def test_totals(self) -> None:
        ledger = ProviderLedger()
        ledger.apply_liquidity_added("lp_b", 5, now=0)
        ledger.apply_liquidity_added("lp_a", 7, now=0)
        assert ledger.providers() == ["lp_a", "lp_b"]
        assert ledger.total_liquidity() == 12
