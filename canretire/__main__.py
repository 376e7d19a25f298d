"""CLI entry point for canretire."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from .optimizer import optimize_spending_to_exhaust
from .provider import ReferenceTaxDataProvider, TaxDataError, load_snapshot
from .report import render_text, write_json
from .schema import SchemaError, load_scenario
from .simulation import run_projection
from .tax_data import BASE_TAX_YEAR
from .validate import validate_scenario
from .variants import DEFAULT_YEARS_EARLIER, VariantKind, VariantSpec, build_variant


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Canadian retirement portfolio projection")
    parser.add_argument("scenario", help="Path to scenario JSON file")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--json", dest="json_output", help="Write full results as JSON to this path")
    parser.add_argument("--variant", choices=[kind.value for kind in VariantKind], help="Run a what-if variant of the scenario")
    parser.add_argument("--years-earlier", type=int, default=DEFAULT_YEARS_EARLIER, help="Years earlier for the retire_early variant")
    parser.add_argument("--optimize", action="store_true", help="Search for the monthly spending that lasts to longevity")
    parser.add_argument("--tax-year", type=int, default=BASE_TAX_YEAR, help=f"Tax table year (default: {BASE_TAX_YEAR})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
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
        scenario = load_scenario(args.scenario)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load scenario: {exc}", file=sys.stderr)
        return 2

    if args.variant:
        try:
            scenario = build_variant(scenario, VariantSpec(kind=VariantKind(args.variant), years_earlier=args.years_earlier))
        except ValueError as exc:
            print(f"Failed to build variant: {exc}", file=sys.stderr)
            return 2

    validation = validate_scenario(scenario)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Scenario is valid.")
        return 0

    try:
        tables = load_snapshot(ReferenceTaxDataProvider(), scenario.province, args.tax_year)
    except TaxDataError as exc:
        print(f"Tax data unavailable: {exc}", file=sys.stderr)
        return 2

    results = run_projection(scenario, tables)

    if args.summary:
        print(render_text(results))
    else:
        outcome = "never" if results.depletion_age is None else str(results.depletion_age)
        print(f"{results.scenario_name}: final balance ${results.final_balance:,.0f}, depletion age {outcome}")

    if args.optimize:
        optimized = optimize_spending_to_exhaust(scenario, tables)
        print(f"Optimized spending: ${optimized.optimized_monthly:,.0f}/month after {optimized.iterations} iterations")
        if optimized.message:
            print(optimized.message)

    if args.json_output:
        write_json(args.json_output, results)
        print(f"Wrote results to {Path(args.json_output)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
