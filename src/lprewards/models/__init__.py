"""Core data models for the LP reward engine."""

from lprewards.models.provider import ProviderRecord
from lprewards.models.rewards import PoolReinitPolicy, RewardBreakdown, RewardRates

__all__ = [
    "PoolReinitPolicy",
    "ProviderRecord",
    "RewardBreakdown",
    "RewardRates",
]
