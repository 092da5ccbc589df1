"""Provider ledger — per-provider liquidity, lockup and contribution state."""

from lprewards.ledger.provider_ledger import ProviderLedger

__all__ = ["ProviderLedger"]
