"""Bisection search for the monthly spending that exhausts a portfolio at longevity."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Final

from .provider import TaxTableSnapshot
from .schema import ScenarioInputs
from .simulation import CalculationResults, run_projection

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE: Final[float] = 10_000.0
DEFAULT_MAX_ITERATIONS: Final[int] = 15
# Search stops once the bracket is narrower than this many dollars per month.
MIN_BRACKET_WIDTH: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class OptimizationResult:
    optimized_monthly: float
    iterations: int
    final_balance: float
    depletion_age: int | None
    converged: bool
    message: str = ""


def _with_spending(baseline: ScenarioInputs, monthly: float) -> ScenarioInputs:
    return replace(baseline, expenses=replace(baseline.expenses, fixed_monthly=monthly))


def _run(baseline: ScenarioInputs, monthly: float, tables: TaxTableSnapshot) -> CalculationResults:
    return run_projection(_with_spending(baseline, monthly), tables)


def _sustainable_spending(
    baseline: ScenarioInputs,
    tables: TaxTableSnapshot,
    baseline_depletion_age: int,
    max_iterations: int,
) -> OptimizationResult:
    longevity = baseline.longevity_age
    low = baseline.expenses.fixed_monthly * 0.5
    high = baseline.expenses.fixed_monthly
    iterations = 0
    while high - low > MIN_BRACKET_WIDTH and iterations < max_iterations:
        mid = (low + high) / 2
        results = _run(baseline, mid, tables)
        iterations += 1
        logger.debug("iteration %d: $%.0f/mo depletes at %s", iterations, mid, results.depletion_age)
        if results.depletion_age is None or results.depletion_age >= longevity:
            low = mid
        else:
            high = mid

    sustainable = (low + high) / 2
    final = _run(baseline, sustainable, tables)
    logger.info("sustainable spending $%.0f/mo after %d iterations", sustainable, iterations)
    return OptimizationResult(
        optimized_monthly=sustainable,
        iterations=iterations,
        final_balance=final.final_balance,
        depletion_age=final.depletion_age,
        converged=True,
        message=(
            f"Current spending exhausts the portfolio at age {baseline_depletion_age}. "
            f"To reach age {longevity}, reduce spending to ${sustainable:,.0f}/month."
        ),
    )


def optimize_spending_to_exhaust(
    baseline: ScenarioInputs,
    tables: TaxTableSnapshot,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> OptimizationResult:
    """Find the highest fixed monthly spending that lasts until the longevity age.

    When the baseline already runs out early the search is over 50%-100% of
    the baseline and looks for the sustainable level instead. Otherwise it
    searches 80%-300% and stops as soon as a candidate depletes exactly at
    the longevity age or leaves no more than ``tolerance`` behind.
    """
    longevity = baseline.longevity_age
    baseline_results = run_projection(baseline, tables)
    if baseline_results.depletion_age is not None and baseline_results.depletion_age < longevity:
        return _sustainable_spending(baseline, tables, baseline_results.depletion_age, max_iterations)

    low = baseline.expenses.fixed_monthly * 0.8
    high = baseline.expenses.fixed_monthly * 3.0
    iterations = 0
    while high - low > MIN_BRACKET_WIDTH and iterations < max_iterations:
        mid = (low + high) / 2
        results = _run(baseline, mid, tables)
        iterations += 1
        depletion_age = results.depletion_age
        logger.debug(
            "iteration %d: $%.0f/mo depletes at %s, final balance %.0f",
            iterations,
            mid,
            depletion_age,
            results.final_balance,
        )
        if depletion_age is not None:
            if depletion_age < longevity:
                high = mid
                continue
            logger.info("converged at $%.0f/mo after %d iterations", mid, iterations)
            return OptimizationResult(mid, iterations, results.final_balance, depletion_age, True)
        else:
            if results.final_balance <= tolerance:
                logger.info("converged at $%.0f/mo after %d iterations", mid, iterations)
                return OptimizationResult(mid, iterations, results.final_balance, None, True)
            low = mid

    best = (low + high) / 2
    final = _run(baseline, best, tables)
    logger.info("search stopped at $%.0f/mo after %d iterations", best, iterations)
    return OptimizationResult(best, iterations, final.final_balance, final.depletion_age, False)
