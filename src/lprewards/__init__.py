"""LP rewards — reward accrual engine for liquidity providers."""

__version__ = "0.1.0"

from lprewards.errors import (
    AlreadyInitialized,
    ArithmeticOverflow,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidDuration,
    RewardEngineError,
    Unauthorized,
)
from lprewards.service import LiquidityRewardService, ServiceResult, sole_event_source

__all__ = [
    "AlreadyInitialized",
    "ArithmeticOverflow",
    "InsufficientLiquidity",
    "InvalidAmount",
    "InvalidDuration",
    "LiquidityRewardService",
    "RewardEngineError",
    "ServiceResult",
    "Unauthorized",
    "sole_event_source",
]
