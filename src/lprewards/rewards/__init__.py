"""Reward subsystem — five-factor reward engine and pool accumulator."""

from lprewards.rewards.engine import RewardEngine
from lprewards.rewards.pool import PoolRewardAccumulator

__all__ = [
    "PoolRewardAccumulator",
    "RewardEngine",
]
