"""LP rewards CLI — command-line interface for the reward engine.

Usage:
    python -m lprewards.cli status
    python -m lprewards.cli check-config
    python -m lprewards.cli quote --liquidity 500 --start 0 --now 86400
    python -m lprewards.cli replay scenario.json --events events.jsonl

A replay scenario is a JSON list of notifications (or an object with a
"notifications" list). Each notification has a "type":

    {"type": "pool_initialized", "pool": "pool_a", "value": 0}
    {"type": "add", "provider": "lp_1", "pool": "pool_a", "delta": 500, "now": 0}
    {"type": "remove", "provider": "lp_1", "pool": "pool_a", "delta": -200, "now": 86400}
    {"type": "lock", "provider": "lp_1", "duration": 864000, "now": 0}
    {"type": "cross_platform", "provider": "lp_1", "now": 0}

"add" and "remove" send the before- and after-notification pair. Every
notification is sent as the designated event source unless it names a
"caller".
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from lprewards.models.provider import ProviderRecord
from lprewards.persistence.event_log import EventLog
from lprewards.policy.resolver import PolicyResolver
from lprewards.rewards.engine import RewardEngine
from lprewards.service import LiquidityRewardService, ServiceResult, sole_event_source


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config"
EVENT_SOURCE = "pool_manager"


def _load_resolver(config_dir: Path) -> PolicyResolver:
    if (config_dir / "reward_params.json").exists():
        return PolicyResolver.from_config_dir(config_dir)
    logging.getLogger(__name__).info(
        "No reward_params.json in %s, using reference rates", config_dir,
    )
    return PolicyResolver.default()


def cmd_status(args: argparse.Namespace) -> int:
    service = LiquidityRewardService(
        _load_resolver(args.config), authorizer=sole_event_source(EVENT_SOURCE),
    )
    print(json.dumps(service.status(), indent=2))
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    """Validate the config directory."""
    try:
        resolver = PolicyResolver.from_config_dir(args.config)
    except (OSError, ValueError) as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1
    print(json.dumps(resolver.as_dict(), indent=2))
    return 0


def cmd_quote(args: argparse.Namespace) -> int:
    """Quote the reward for a hypothetical provider record."""
    engine = RewardEngine(_load_resolver(args.config))
    record = ProviderRecord(
        provider_id=args.provider,
        total_liquidity=args.liquidity,
        liquidity_start_time=args.start,
        consecutive_days=args.days,
        lockup_end_time=args.lockup_end,
        cross_platform_contributions=args.cross,
    )
    try:
        breakdown = engine.quote(record, args.pool, args.now)
    except (OverflowError, ValueError) as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    print(json.dumps(breakdown.to_dict(), indent=2))
    return 0


def _dispatch(service: LiquidityRewardService, note: dict[str, Any]) -> list[ServiceResult]:
    kind = note.get("type")
    caller = note.get("caller", EVENT_SOURCE)
    now = int(note.get("now", 0))

    if kind == "pool_initialized":
        return [service.notify_pool_initialized(
            caller, note["pool"], int(note.get("value", 0)), now,
        )]
    if kind == "add":
        before = service.notify_before_add(
            caller, note["provider"], note["pool"], int(note["delta"]), now,
        )
        if not before.success:
            return [before]
        return [before, service.notify_after_add(caller, note["provider"], note["pool"], now)]
    if kind == "remove":
        before = service.notify_before_remove(
            caller, note["provider"], note["pool"], int(note["delta"]), now,
        )
        if not before.success:
            return [before]
        return [before, service.notify_after_remove(caller, note["provider"], note["pool"], now)]
    if kind == "lock":
        return [service.lock_liquidity(
            note.get("caller", note["provider"]), note["provider"],
            int(note["duration"]), now,
        )]
    if kind == "cross_platform":
        return [service.record_cross_platform_contribution(caller, note["provider"], now)]
    return [ServiceResult(success=False, errors=[f"Unknown notification type: {kind}"])]


def cmd_replay(args: argparse.Namespace) -> int:
    """Replay a scenario of notifications and print the resulting state."""
    try:
        with args.scenario.open("r", encoding="utf-8") as handle:
            scenario = json.load(handle)
    except (OSError, ValueError) as e:
        print(f"Invalid scenario: {e}", file=sys.stderr)
        return 1
    notifications = scenario["notifications"] if isinstance(scenario, dict) else scenario

    event_log = EventLog(storage_path=args.events) if args.events else None
    service = LiquidityRewardService(
        _load_resolver(args.config),
        authorizer=sole_event_source(EVENT_SOURCE),
        event_log=event_log,
    )

    rewards: list[dict[str, Any]] = []
    for index, note in enumerate(notifications):
        try:
            results = _dispatch(service, note)
        except (KeyError, TypeError, ValueError) as e:
            print(f"Malformed notification #{index}: {e}", file=sys.stderr)
            return 1
        for result in results:
            if not result.success:
                print(
                    f"Notification #{index} failed: {'; '.join(result.errors)}",
                    file=sys.stderr,
                )
                return 1
            if "reward" in result.data:
                rewards.append({
                    "provider_id": result.data["provider_id"],
                    "pool_id": result.data["pool_id"],
                    "reward": result.data["reward"],
                })

    providers = {}
    for provider_id in service.engine.ledger.providers():
        record = service.get_provider(provider_id)
        providers[provider_id] = record.to_dict()

    print(json.dumps(
        {
            "rewards": rewards,
            "providers": providers,
            "pools": service.engine.pools.pools(),
            "events": service.event_log.count,
        },
        indent=2,
    ))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lprewards",
        description="LP rewards — liquidity provider reward engine CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config directory (default: config/)",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: warning)",
    )
    sub = parser.add_subparsers(dest="command")

    # status
    sub.add_parser("status", help="Show engine status")

    # check-config
    sub.add_parser("check-config", help="Validate reward_params.json")

    # quote
    p_quote = sub.add_parser("quote", help="Quote a reward for a hypothetical record")
    p_quote.add_argument("--provider", default="provider", help="Provider ID")
    p_quote.add_argument("--pool", default="pool", help="Pool ID")
    p_quote.add_argument("--liquidity", type=int, required=True, help="Total liquidity")
    p_quote.add_argument("--start", type=int, required=True, help="Accrual window start (unix s)")
    p_quote.add_argument("--now", type=int, required=True, help="Computation time (unix s)")
    p_quote.add_argument("--days", type=int, default=0, help="Consecutive days reached")
    p_quote.add_argument("--cross", type=int, default=0, help="Cross-platform contributions")
    p_quote.add_argument("--lockup-end", type=int, default=0, help="Lockup end time (unix s)")

    # replay
    p_replay = sub.add_parser("replay", help="Replay a notification scenario")
    p_replay.add_argument("scenario", type=Path, help="Scenario JSON file")
    p_replay.add_argument("--events", type=Path, help="Append events to this JSONL file")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "status": cmd_status,
        "check-config": cmd_check_config,
        "quote": cmd_quote,
        "replay": cmd_replay,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
