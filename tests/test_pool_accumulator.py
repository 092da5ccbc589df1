"""Tests for the pool reward accumulator — monotonic totals and init policy."""

import pytest

from lprewards.errors import AlreadyInitialized, ArithmeticOverflow, InvalidAmount
from lprewards.models.rewards import PoolReinitPolicy
from lprewards.rewards.pool import PoolRewardAccumulator


class TestAccumulation:
    def test_unknown_pool_reads_zero(self) -> None:
        pools = PoolRewardAccumulator()
        assert pools.read("pool_a") == 0
        assert not pools.is_initialized("pool_a")

    def test_add_creates_implicitly(self) -> None:
        pools = PoolRewardAccumulator()
        assert pools.add("pool_a", 10) == 10
        assert pools.read("pool_a") == 10
        assert not pools.is_initialized("pool_a")

    def test_sum_of_adds(self) -> None:
        pools = PoolRewardAccumulator()
        amounts = [3, 0, 17, 250]
        for amount in amounts:
            pools.add("pool_a", amount)
        assert pools.read("pool_a") == sum(amounts)

    def test_pools_are_independent(self) -> None:
        pools = PoolRewardAccumulator()
        pools.add("pool_a", 5)
        pools.add("pool_b", 7)
        assert pools.pools() == {"pool_a": 5, "pool_b": 7}
        assert pools.total() == 12

    def test_negative_add_rejected(self) -> None:
        pools = PoolRewardAccumulator()
        pools.add("pool_a", 5)
        with pytest.raises(InvalidAmount):
            pools.add("pool_a", -1)
        assert pools.read("pool_a") == 5

    def test_overflow_rejected(self) -> None:
        pools = PoolRewardAccumulator(max_value=100)
        pools.add("pool_a", 90)
        assert pools.headroom("pool_a") == 10
        with pytest.raises(ArithmeticOverflow):
            pools.add("pool_a", 11)
        assert pools.read("pool_a") == 90
        assert pools.add("pool_a", 10) == 100


class TestInitialization:
    def test_initialize_seeds_value(self) -> None:
        pools = PoolRewardAccumulator()
        pools.initialize("pool_a", 1_000)
        pools.add("pool_a", 1)
        assert pools.read("pool_a") == 1_001
        assert pools.is_initialized("pool_a")

    def test_default_policy_overwrites(self) -> None:
        pools = PoolRewardAccumulator()
        pools.initialize("pool_a", 1_000)
        pools.add("pool_a", 5)
        pools.initialize("pool_a", 7)
        assert pools.read("pool_a") == 7

    def test_reject_policy(self) -> None:
        pools = PoolRewardAccumulator(reinit_policy=PoolReinitPolicy.REJECT)
        pools.initialize("pool_a", 1_000)
        with pytest.raises(AlreadyInitialized):
            pools.initialize("pool_a", 7)
        assert pools.read("pool_a") == 1_000

    def test_reject_policy_allows_after_implicit_creation(self) -> None:
        pools = PoolRewardAccumulator(reinit_policy=PoolReinitPolicy.REJECT)
        pools.add("pool_a", 5)
        pools.initialize("pool_a", 50)
        assert pools.read("pool_a") == 50

    def test_negative_start_rejected(self) -> None:
        pools = PoolRewardAccumulator()
        with pytest.raises(InvalidAmount):
            pools.initialize("pool_a", -1)
        assert not pools.is_initialized("pool_a")

    def test_start_above_max_rejected(self) -> None:
        pools = PoolRewardAccumulator(max_value=10)
        with pytest.raises(ArithmeticOverflow):
            pools.initialize("pool_a", 11)

    def test_check_initialize_has_no_effect(self) -> None:
        pools = PoolRewardAccumulator()
        pools.check_initialize("pool_a", 10)
        assert not pools.is_initialized("pool_a")
        assert pools.read("pool_a") == 0
