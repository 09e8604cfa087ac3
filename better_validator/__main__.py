#!/usr/bin/env python3
r"""better-validator CLI.

Commands:
    python -m better_validator --version          Show version
    python -m better_validator info               Show version and system info
    python -m better_validator inspect MOD:CLASS  Show the rules discovered on a class

Examples:
    # Which rules will run for orders.models.Order, and in which order?
    python -m better_validator inspect orders.models:Order

    # Same, as JSON
    python -m better_validator inspect orders.models:Order --json
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from typing import Any, Dict, List, Optional


def cmd_info(args: argparse.Namespace) -> int:
    """Show detailed version and system information."""
    from ._version import print_version_info

    print_version_info()
    return 0


def load_class(target: str) -> type:
    """Import ``module:QualName`` and return the class it names.

    Raises:
        ValueError: If `target` is malformed or does not name a class.
    """
    module_name, sep, qualname = target.partition(":")
    if not sep or not module_name or not qualname:
        raise ValueError(f"Expected MODULE:CLASS, got {target!r}")

    obj: Any = importlib.import_module(module_name)
    for part in qualname.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, type):
        raise ValueError(f"{target} is not a class")
    return obj


def describe_metadata(cls: type) -> Dict[str, Any]:
    """Return the extracted rule sets of `cls` as plain data."""
    from .metadata import extract_metadata

    metadata = extract_metadata(cls)

    def names(rules) -> List[str]:
        return [
            type(rule).__name__ + (" (required)" if rule.is_required else "")
            for rule in rules
        ]

    return {
        "type": f"{cls.__module__}.{cls.__qualname__}",
        "type_rules": names(metadata.type_rules),
        "field_rules": {
            field: names(rules) for field, rules in metadata.field_rules.items()
        },
    }


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the rules discovered on a class."""
    from .utils import ValidatorError

    try:
        cls = load_class(args.target)
    except (ImportError, AttributeError, ValueError) as e:
        print(f"error: cannot load {args.target}: {e}", file=sys.stderr)
        return 2

    try:
        description = describe_metadata(cls)
    except ValidatorError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(description, indent=2))
        return 0

    print(description["type"])
    print("  type rules:")
    for name in description["type_rules"] or ["-"]:
        print(f"    {name}")
    print("  field rules:")
    if not description["field_rules"]:
        print("    -")
    for field, rules in description["field_rules"].items():
        print(f"    {field}: {', '.join(rules)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for better-validator."""
    from ._version import __version__

    parser = argparse.ArgumentParser(
        prog="python -m better_validator",
        description="better-validator - configurable object validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m better_validator --version              Show version
  python -m better_validator info                   Show detailed system info
  python -m better_validator inspect pkg.mod:Model  Show rules of a class
        """,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"better-validator {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    info_parser = subparsers.add_parser(
        "info",
        help="Show detailed version and system information",
        description="Display version, Python, platform, and dependency information.",
    )
    info_parser.set_defaults(func=cmd_info)

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show the rules discovered on a class",
        description="Import MODULE:CLASS and print its type and field rules.",
    )
    inspect_parser.add_argument("target", help="Class to inspect, as MODULE:CLASS")
    inspect_parser.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )
    inspect_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if getattr(args, "verbose", False):
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(asctime)s] [%(levelname)-5s] [%(name)s:%(lineno)d] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
