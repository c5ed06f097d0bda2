"""Command-line front end for named counters.

Examples:
    counter -n subscriptions -a          Add 1 to the counter
    counter -n subscriptions -S 1000     Set the counter to 1000
    counter -n subscriptions -R -y       Reset the counter to 0
    counter -n daily_hits -c daily -i midnight
                                         Reset daily_hits once a day
    counter -n daily_hits -r             Remove the cycle again
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from counter.config import Settings, load_settings
from counter.constants import VERSION
from counter.errors import CounterError, describe
from counter.lib.logger import configure_logging
from counter.operations.schemas import OperationRequest, OperationResult
from counter.operations.service import run_operation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="counter",
        description="Durable named counters with optional automatic reset cycles",
        epilog="Environment: COUNTER_DIR, COUNTER_QUANTITY, COUNTER_USE_FORCE, COUNTER_ALWAYS_YES, "
        "COUNTER_NEVER_* and COUNTER_LOG_LEVEL (see --env).",
    )

    target = parser.add_argument_group("getting to the counter")
    target.add_argument("-n", "--name", help="Counter name")
    target.add_argument("-d", "--dir", help="Directory to save counters (overrides COUNTER_DIR)")
    target.add_argument("-f", "--file", help="Counter file path, absolute or relative to the directory")
    target.add_argument("-F", "--force", action="store_true", help="Create the counter directory if missing")

    ops = parser.add_argument_group("working with counters")
    ops.add_argument("-a", "--add", action="store_true", help="Add -q=N (default 1) to the counter")
    ops.add_argument("-s", "--sub", action="store_true", help="Subtract -q=N (default 1) from the counter")
    ops.add_argument("-q", "--quantity", type=int, help="Quantity to add or subtract")
    ops.add_argument("-S", "--set", dest="set_to", type=int, help="Set the counter to a value")
    ops.add_argument("-R", "--reset", action="store_true", help="Reset the counter to 0")
    ops.add_argument("-D", "--delete", action="store_true", help="Delete the counter")
    ops.add_argument("-y", "--yes", action="store_true", help="Confirm destructive actions")

    cycles = parser.add_argument_group("automatic reset cycles")
    cycles.add_argument("-c", "--cycle", help="Reset cycle (hourly, daily, weekly, monthly, annually, every, 90min, ...)")
    cycles.add_argument("-i", "--in", dest="cycle_in", default="", help="Time within the cycle (e.g. noon, monday, 12:00, 30)")
    cycles.add_argument("-r", "--rmcc", action="store_true", help="Remove the cycle from the counter")

    output = parser.add_argument_group("output")
    output.add_argument("-j", "--json", action="store_true", help="Show JSON formatted output")
    output.add_argument("-e", "--env", action="store_true", help="Show environment configuration")
    output.add_argument("-v", "--version", action="store_true", help="Show version")
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates: dict[str, Any] = {}
    if args.dir:
        updates["counter_dir"] = Path(args.dir).expanduser()
    if args.force:
        updates["use_force"] = True
    return settings.model_copy(update=updates) if updates else settings


def _render(result: OperationResult, as_json: bool) -> str:
    if as_json:
        payload = result.counter.model_dump(mode="json")
        if result.next_reset_at is not None:
            payload["next_reset_at"] = result.next_reset_at.isoformat()
        if result.action == "delete":
            payload["deleted"] = result.deleted
        return json.dumps(payload, indent=2)
    if result.message:
        return result.message
    return str(result.counter.value)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(VERSION)
        return 0

    try:
        settings = _apply_overrides(load_settings(), args)
    except CounterError as exc:
        print(f"Error: {describe(exc)}", file=sys.stderr)
        return 1
    configure_logging(settings.log_level)

    if args.env:
        env = settings.as_env()
        if args.json:
            print(json.dumps(env, indent=2))
        else:
            for variable, value in env.items():
                print(f"{variable}={value}")
        return 0

    if not args.name and not args.file:
        parser.error("--name or --file is required")

    try:
        request = OperationRequest(
            name=args.name,
            file=args.file,
            add=args.add,
            subtract=args.sub,
            set_to=args.set_to,
            quantity=args.quantity,
            reset=args.reset,
            delete=args.delete,
            confirm=args.yes,
            cycle=args.cycle,
            cycle_in=args.cycle_in,
            remove_cycle=args.rmcc,
        )
    except ValidationError as exc:
        parser.error(str(exc.errors()[0]["msg"]))

    try:
        result = run_operation(request, settings)
    except CounterError as exc:
        print(f"Error: {describe(exc)}", file=sys.stderr)
        return 1

    print(_render(result, args.json))
    return 0
