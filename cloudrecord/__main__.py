"""CLI entry point for cloudrecord."""

import argparse
import asyncio
import inspect
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .client import RecordClient
from .config import Config, load_config
from .errors import CloudRecordError
from .record import Record

logger = logging.getLogger("cloudrecord")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "info", json_output: bool = False) -> None:
    """Configure root logging for the CLI.

    Args:
        level: Level name such as "warning", "info" or "debug".
        json_output: Output logs as JSON lines for machine parsing.
    """
    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )


def load_script(path: Path) -> dict[str, Any]:
    """Load a mutation script (YAML or JSON)."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if "class" not in data:
        raise ValueError(f"{path}: missing 'class'")
    return data


def build_record(script: dict[str, Any]) -> Record:
    """Apply the mutations of a script to a fresh record.

    Each mutation is a mapping with an `op` of set, unset, append, remove or
    increment, plus `key` and the op's arguments.
    """
    record = Record(script["class"], object_id=script.get("object_id"))

    for index, mutation in enumerate(script.get("mutations", [])):
        op = mutation.get("op")
        key = mutation.get("key")
        logger.debug(f"Mutation {index}: {op} {key}")

        if op == "set":
            record.set(key, mutation.get("value"))
        elif op == "unset":
            record.unset(key)
        elif op == "append":
            record.append(key, mutation.get("value"), unique=mutation.get("unique", False))
        elif op == "remove":
            record.remove(key, mutation.get("value"))
        elif op == "increment":
            record.increment(key, mutation.get("amount", 1))
        else:
            raise ValueError(f"Mutation {index}: unknown op '{op}'")

    return record


def cmd_plan(args: argparse.Namespace) -> int:
    """Print the reduced update payload for a mutation script."""
    try:
        record = build_record(load_script(args.script))
    except (CloudRecordError, OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(record.update_payload(), indent=2))
    return 0


async def cmd_save(args: argparse.Namespace) -> int:
    """Apply a mutation script and save the record."""
    config: Config = args.loaded_config

    try:
        record = build_record(load_script(args.script))
    except (CloudRecordError, OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = RecordClient(config.server, config.client)
    try:
        result = await client.save(record)
    except CloudRecordError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved {record.class_name}/{result.object_id}")
    print(f"  Operations sent: {result.operations_sent}")
    print(f"  Created: {'Yes' if result.created else 'No'}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration."""
    data = asdict(args.loaded_config)
    if data["server"]["app_key"]:
        data["server"]["app_key"] = "***"
    print(json.dumps(data, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="cloudrecord",
        description="Build records locally and sync minimal changes to a remote store",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: built-in defaults)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["warning", "info", "debug"],
        default=None,
        help="Set log level explicitly (overrides -v/--verbose)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output logs as JSON for machine parsing",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    plan_parser = subparsers.add_parser("plan", help="Print the update payload for a script")
    plan_parser.add_argument("script", type=Path, help="Mutation script (YAML or JSON)")
    plan_parser.set_defaults(func=cmd_plan)

    save_parser = subparsers.add_parser("save", help="Apply a script and save the record")
    save_parser.add_argument("script", type=Path, help="Mutation script (YAML or JSON)")
    save_parser.set_defaults(func=cmd_save)

    config_parser = subparsers.add_parser("config", help="Show effective configuration")
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    config = load_config(args.config)
    args.loaded_config = config
    setup_logging(
        args.log_level or ("debug" if args.verbose else config.logging.level),
        args.json or config.logging.json,
    )

    if not args.command:
        parser.print_help()
        return 1

    func = args.func
    if inspect.iscoroutinefunction(func):
        return asyncio.run(func(args))
    return func(args)


if __name__ == "__main__":
    sys.exit(main())
