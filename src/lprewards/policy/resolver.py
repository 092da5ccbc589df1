"""Policy resolver — loads reward rates and engine policy from config.

The config directory holds reward_params.json:

    {
      "reward_rates": {
        "time_rate": ..., "amount_rate": ...,
        "milestone_rate": ..., "cross_platform_rate": ...
      },
      "milestone": {"day_seconds": 86400},
      "limits": {"max_reward_value": ...},
      "pools": {"reinitialization": "overwrite" | "reject"}
    }

Every key is optional; missing keys fall back to the RewardRates
defaults. Invalid values fail at load time, never at reward time.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from lprewards.models.rewards import PoolReinitPolicy, RewardRates

logger = logging.getLogger(__name__)

PARAMS_FILENAME = "reward_params.json"

_RATE_KEYS = ("time_rate", "amount_rate", "milestone_rate", "cross_platform_rate")


class PolicyResolver:
    """Resolves reward rates and pool policy from loaded parameters.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        rates = resolver.reward_rates()
        policy = resolver.pool_reinit_policy()
    """

    def __init__(self, params: Optional[dict[str, Any]] = None) -> None:
        self._params: dict[str, Any] = dict(params or {})
        self._rates = self._build_rates(self._params)
        self._reinit_policy = self._build_reinit_policy(self._params)

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load reward_params.json from a config directory."""
        path = Path(config_dir) / PARAMS_FILENAME
        with path.open("r", encoding="utf-8") as handle:
            params = json.load(handle)
        if not isinstance(params, dict):
            raise ValueError(f"{path} must contain a JSON object")
        logger.debug("Loaded reward params from %s", path)
        return cls(params)

    @classmethod
    def default(cls) -> PolicyResolver:
        """Resolver with the reference rates and overwrite pool policy."""
        return cls({})

    def reward_rates(self) -> RewardRates:
        return self._rates

    def pool_reinit_policy(self) -> PoolReinitPolicy:
        return self._reinit_policy

    def as_dict(self) -> dict[str, Any]:
        """Effective parameters, defaults included."""
        rates = self._rates
        return {
            "reward_rates": {
                "time_rate": rates.time_rate,
                "amount_rate": rates.amount_rate,
                "milestone_rate": rates.milestone_rate,
                "cross_platform_rate": rates.cross_platform_rate,
            },
            "milestone": {"day_seconds": rates.day_seconds},
            "limits": {"max_reward_value": rates.max_reward_value},
            "pools": {"reinitialization": self._reinit_policy.value},
        }

    @staticmethod
    def _build_rates(params: dict[str, Any]) -> RewardRates:
        defaults = RewardRates()
        rate_params = _section(params, "reward_rates")
        values: dict[str, int] = {}
        for key in _RATE_KEYS:
            value = rate_params.get(key, getattr(defaults, key))
            values[key] = _require_int(f"reward_rates.{key}", value, minimum=0)

        day_seconds = _require_int(
            "milestone.day_seconds",
            _section(params, "milestone").get("day_seconds", defaults.day_seconds),
            minimum=1,
        )
        max_value = _require_int(
            "limits.max_reward_value",
            _section(params, "limits").get("max_reward_value", defaults.max_reward_value),
            minimum=1,
        )
        return RewardRates(
            day_seconds=day_seconds,
            max_reward_value=max_value,
            **values,
        )

    @staticmethod
    def _build_reinit_policy(params: dict[str, Any]) -> PoolReinitPolicy:
        raw = _section(params, "pools").get(
            "reinitialization", PoolReinitPolicy.OVERWRITE.value,
        )
        try:
            return PoolReinitPolicy(raw)
        except ValueError:
            valid = ", ".join(p.value for p in PoolReinitPolicy)
            raise ValueError(
                f"pools.reinitialization must be one of: {valid} (got {raw!r})"
            ) from None


def _section(params: dict[str, Any], name: str) -> dict[str, Any]:
    section = params.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"{name} must be an object, got {section!r}")
    return section


def _require_int(name: str, value: Any, minimum: int) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value
