"""CLI entry point for HFP."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from .engine import run_plan
from .report import render_summary, write_export
from .schema import SchemaError, load_entries_csv, load_plan
from .validate import validate_plan, validate_projection


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Household financial projection")
    parser.add_argument("plan", help="Path to plan JSON file")
    parser.add_argument("-o", "--output", default="projection.csv", help="Output CSV path")
    parser.add_argument("--entries", help="CSV of entries that replaces the plan's entries")
    parser.add_argument("--validate", action="store_true", help="Validate the plan only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--detailed", action="store_true", help="Include balances and contributions in the export")
    parser.add_argument("--check", action="store_true", help="Audit the projection and fail on inconsistencies")
    parser.add_argument("--roth-conversions", action="store_true", help="Enable Roth conversions regardless of plan settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline decisions")
    return parser


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        plan = load_plan(args.plan)
        if args.entries:
            plan.entries = load_entries_csv(args.entries)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load plan: {exc}", file=sys.stderr)
        return 2

    validation = validate_plan(plan)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Plan is valid.")
        return 0

    overrides = {"roth_conversions": True} if args.roth_conversions else {}
    summaries = run_plan(plan, **overrides)
    write_export(args.output, summaries, detailed=args.detailed)

    if args.summary:
        print(render_summary(summaries))

    print(f"Wrote projection to {Path(args.output)}")

    if args.check:
        audit = validate_projection(summaries)
        _print_validation(audit.errors, audit.warnings)
        if not audit.is_valid:
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
