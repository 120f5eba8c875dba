"""Command line helpers for inspecting contracts and connection descriptors."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .contracts import ENTRY_POINTS, build_contracts
from .schemas import SchemaSet
from .shapes import Tagged

LOG = logging.getLogger(__name__)


def _parse_descriptor(raw: str) -> object:
    """JSON objects are decoded; anything else is treated as a bare URL."""

    text = raw.strip()
    if text.startswith("{"):
        return json.loads(text)
    return text


def _cmd_catalog(args: argparse.Namespace) -> int:
    contracts = build_contracts()
    names = args.names or ENTRY_POINTS
    for name in names:
        contract = contracts.get(name)
        if contract is None:
            print(f"unknown entry point: {name}", file=sys.stderr)
            return 2
        print(contract.describe())
    return 0


def _cmd_check_spec(args: argparse.Namespace) -> int:
    try:
        value = _parse_descriptor(args.value)
    except json.JSONDecodeError as exc:
        print(f"invalid JSON: {exc}", file=sys.stderr)
        return 2
    result = SchemaSet().db_spec.match(value)
    if result.problem is not None:
        if args.json:
            print(json.dumps(result.problem.to_dict(), default=repr, indent=2))
        else:
            print(result.problem.describe())
        return 1
    tagged: Tagged = result.value
    if args.json:
        print(json.dumps({"variant": tagged.label}))
    else:
        print(f"valid {tagged.label}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sqlcontract", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    catalog = subcommands.add_parser("catalog", help="List entry points and their call forms.")
    catalog.add_argument("names", nargs="*", help="Entry points to show (default: all).")
    catalog.set_defaults(handler=_cmd_catalog)

    check = subcommands.add_parser("check-spec", help="Validate a JDBC URL or JSON connection descriptor.")
    check.add_argument("value", help="jdbc:<dbtype>:... URL or a JSON object.")
    check.add_argument("--json", action="store_true", help="Print the report as JSON.")
    check.set_defaults(handler=_cmd_check_spec)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    LOG.debug("Running command", extra={"command": args.command})
    return args.handler(args)


__all__ = ["build_parser", "main"]
