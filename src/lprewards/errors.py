"""Error taxonomy for the reward engine.

Every error is fatal to the operation that raised it. Validation always
happens before mutation, so a raised error means no state was changed.
The service layer converts these into failed ServiceResults; the core
components (ledger, pool accumulator, engine) raise them directly.
"""

from __future__ import annotations


class RewardEngineError(Exception):
    """Base class for all reward engine failures."""


class InvalidAmount(RewardEngineError, ValueError):
    """Raised when a liquidity delta or pool value is out of range."""


class InsufficientLiquidity(RewardEngineError, ValueError):
    """Raised when a removal exceeds the provider's current liquidity."""


class InvalidDuration(RewardEngineError, ValueError):
    """Raised when a lockup duration is not positive."""


class Unauthorized(RewardEngineError, PermissionError):
    """Raised when a caller is not the designated event source."""


class ArithmeticOverflow(RewardEngineError, OverflowError):
    """Raised when a reward or pool total exceeds the representable range."""


class AlreadyInitialized(RewardEngineError, ValueError):
    """Raised on a second pool initialization under the reject policy."""
