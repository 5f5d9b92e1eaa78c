#!/usr/bin/env python3
"""Drive the excuse engine from the command line.

State lives in a JSON file (``--storage``, falling back to
``EXCUSE_STORAGE_PATH`` and then ``./excuse_state.json``) so repeated
invocations behave like app restarts.

Examples:
    python scripts/excuse_cli.py tap
    python scripts/excuse_cli.py lucky 5 10 --year 2024
    python scripts/excuse_cli.py tap-day 5 10
    python scripts/excuse_cli.py tap-today
    python scripts/excuse_cli.py status --json
    python scripts/excuse_cli.py reset
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyexcuse import EngineConfig, ExcuseEngine, JsonFileStorage, TapResult  # noqa: E402

_DEFAULT_STORAGE = "excuse_state.json"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Excuse engine CLI")
    parser.add_argument("--storage", help="Path of the JSON state file")
    parser.add_argument("--seed", type=int, help="Seed for quote draws")
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show entitlement, budget and progress")

    tap = sub.add_parser("tap", help="Reveal the next quote")
    tap.add_argument("--gold", action="store_true", help="Treat the tap as a gold day")

    tap_day = sub.add_parser("tap-day", help="Tap a calendar day (lucky day yields the gold quote)")
    tap_day.add_argument("month", type=int)
    tap_day.add_argument("day", type=int)
    sub.add_parser("tap-today", help="Tap today's calendar entry")

    lucky = sub.add_parser("lucky", help="Choose the lucky day")
    lucky.add_argument("month", type=int)
    lucky.add_argument("day", type=int)
    lucky.add_argument("--year", type=int)

    sub.add_parser("clear-lucky", help="Forget the lucky day")
    sub.add_parser("unlock", help="Record a local purchase")

    paid = sub.add_parser("test-paid", help="Toggle the testing entitlement override")
    paid.add_argument("state", choices=("on", "off"))

    sub.add_parser("reset", help="Wipe all persisted state")
    return parser


def _print_tap(result: TapResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.model_dump(), indent=2))
        return
    if result.needs_purchase:
        print("Free taps used up. Unlock premium to keep going.")
    elif result.is_gold:
        print(f"*** {result.quote} ***")
    else:
        print(result.quote)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.seed is not None:
        overrides["rng_seed"] = args.seed
    config = EngineConfig.from_env(**overrides)
    storage_path = args.storage or config.storage_path or _DEFAULT_STORAGE

    async with ExcuseEngine(JsonFileStorage(storage_path), config=config) as engine:
        if args.command == "tap":
            _print_tap(engine.tap(args.gold), args.json)
        elif args.command == "tap-day":
            _print_tap(engine.tap_day(args.month, args.day), args.json)
        elif args.command == "tap-today":
            _print_tap(engine.tap_date(date.today()), args.json)
        elif args.command == "lucky":
            try:
                lucky_day = engine.set_lucky_day(args.month, args.day, args.year)
            except ValueError as exc:
                print(f"Invalid lucky day: {exc}", file=sys.stderr)
                return 2
            print(f"Lucky day set to {lucky_day.month}/{lucky_day.day} ({lucky_day.year})")
        elif args.command == "clear-lucky":
            engine.clear_lucky_day()
            print("Lucky day cleared")
        elif args.command == "unlock":
            engine.mark_purchased()
            print("Premium unlocked")
        elif args.command == "test-paid":
            engine.set_paid_for_testing(args.state == "on")
            print(f"Testing override {args.state}")
        elif args.command == "reset":
            await engine.reset_for_testing()
            print("All state cleared")

        if args.command == "status":
            status = engine.status()
            if args.json:
                print(json.dumps(status.model_dump(mode="json"), indent=2))
            else:
                print(f"Entitled:        {status.is_entitled} (purchase={status.has_real_purchase}, override={status.testing_override})")
                print(f"Free taps left:  {status.remaining_free_taps}")
                lucky = f"{status.lucky_day.month}/{status.lucky_day.day}" if status.lucky_day else "-"
                print(f"Lucky day:       {lucky}")
                print(f"Seen:            {status.seen_display_count}/{config.seen_display_cap}")
    return 0


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
