"""
Command-line interface for Control Inference.

Resolve control zones and estimate command risk from JSON payloads.
"""

import argparse
import json
import logging
import sys

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import create_default_config_file, load_config
from .engine import InferenceEngine, parse_now
from .reporting import build_summary_prompt, explain_snapshot, explain_zone
from .types import ControlZone


def _load_payload(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(Path(path), encoding="utf-8") as f:
        return json.load(f)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Control Inference - Explainable control zones and command risk"
    )
    parser.add_argument("--config", "-c", help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve control zones from evidence")
    resolve_parser.add_argument("--input", "-i", required=True, help="JSON payload file ('-' for stdin)")
    resolve_parser.add_argument("--now", help="Current time (ISO-8601 or epoch); defaults to system time")
    resolve_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # estimate command
    estimate_parser = subparsers.add_parser("estimate", help="Run the full estimate pipeline")
    estimate_parser.add_argument("--input", "-i", required=True, help="JSON payload file ('-' for stdin)")
    estimate_parser.add_argument("--now", help="Current time (ISO-8601 or epoch); defaults to system time")
    estimate_parser.add_argument("--json", action="store_true", help="Output as JSON")
    estimate_parser.add_argument("--prompt", action="store_true", help="Print the summarizer prompt")

    # config command
    subparsers.add_parser("config", help="Show effective configuration")

    # init command
    subparsers.add_parser("init", help="Create default configuration file")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "init":
        create_default_config_file()
        return 0

    # Load engine
    try:
        engine = InferenceEngine(load_config(args.config))
    except (OSError, ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.command == "config":
        print(json.dumps(engine.get_status(), indent=2))
        return 0

    try:
        payload = _load_payload(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1

    # The clock is read here, at the outer surface, never inside the engine
    now = parse_now(args.now, datetime.now(timezone.utc))

    if args.command == "resolve":
        raw_evidence = payload.get("evidence", payload) if isinstance(payload, dict) else payload
        normalized = engine.normalizer.normalize_evidence(raw_evidence, now)
        zones = engine.resolve_zones(normalized.records, now)

        if args.json:
            print(json.dumps({
                "zones": [zone.to_dict() for zone in zones],
                "rejected": [entry.to_dict() for entry in normalized.rejected],
            }, indent=2))
        else:
            _print_zones(zones)
            if normalized.rejected:
                print(f"Rejected entries: {normalized.rejected_count}")

    elif args.command == "estimate":
        normalized, resolution, snapshot = engine.analyze(payload, now)

        if args.json:
            print(json.dumps(engine.build_result(normalized, resolution, snapshot, now), indent=2))
        else:
            _print_zones(list(resolution.zones))
            print(explain_snapshot(snapshot))
            if normalized.rejected:
                print(f"Rejected entries: {normalized.rejected_count}")

        if args.prompt:
            print()
            print(build_summary_prompt(snapshot))

    return 0


def _print_zones(zones: list[ControlZone]) -> None:
    if not zones:
        print("No control zones")
        return
    print(f"Control Zones ({len(zones)})")
    for zone in zones:
        print(explain_zone(zone))


if __name__ == "__main__":
    sys.exit(main())
