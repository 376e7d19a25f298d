"""Projection orchestration across the full age range of a scenario."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Final, Iterable

from .accounts import AccountBalances
from .engine import RETIREMENT, AccountState, YearResult, simulate_year
from .provider import TaxDataProvider, TaxTableSnapshot, load_snapshot
from .schema import ScenarioInputs
from .tax_data import BASE_TAX_YEAR
from .validate import ScenarioValidationError, validate_scenario

logger = logging.getLogger(__name__)

# A portfolio at or below one cent is treated as exhausted.
DEPLETION_THRESHOLD: Final[float] = 0.01


@dataclass(frozen=True, slots=True)
class CalculationResults:
    scenario_name: str
    years: tuple[YearResult, ...]
    final_balance: float
    depletion_age: int | None
    success: bool
    lifetime_tax_paid: float
    lifetime_cpp: float
    lifetime_oas: float
    first_year_after_tax_income: float
    average_tax_rate_in_retirement: float

    @property
    def retirement_years(self) -> tuple[YearResult, ...]:
        return tuple(item for item in self.years if item.phase == RETIREMENT)


def _aggregate(inputs: ScenarioInputs, years: list[YearResult], depletion_age: int | None) -> CalculationResults:
    retirement = [item for item in years if item.phase == RETIREMENT]
    retirement_tax = sum(item.tax.total for item in retirement)
    retirement_income = sum(item.income.total for item in retirement)
    first = retirement[0] if retirement else None
    return CalculationResults(
        scenario_name=inputs.name,
        years=tuple(years),
        final_balance=years[-1].ending_balances.total if years else 0.0,
        depletion_age=depletion_age,
        success=depletion_age is None,
        lifetime_tax_paid=sum(item.tax.total for item in years),
        lifetime_cpp=sum(item.income.cpp for item in years),
        lifetime_oas=sum(item.income.oas for item in years),
        first_year_after_tax_income=first.income.total - first.tax.total if first else 0.0,
        average_tax_rate_in_retirement=retirement_tax / retirement_income if retirement_income > 0 else 0.0,
    )


def run_projection(inputs: ScenarioInputs, tables: TaxTableSnapshot) -> CalculationResults:
    """Simulate every age from ``current_age`` through ``longevity_age`` inclusive.

    Raises :class:`ScenarioValidationError` before simulating anything when the
    scenario is invalid. Once the portfolio is exhausted, in any phase, its
    balances stay at zero for the rest of the run.
    """
    validation = validate_scenario(inputs)
    if not validation.is_valid:
        raise ScenarioValidationError(validation.errors)

    state = AccountState.seed(inputs)
    years: list[YearResult] = []
    depletion_age: int | None = None

    for age in range(inputs.current_age, inputs.longevity_age + 1):
        result, state = simulate_year(state, age, inputs, tables)
        if depletion_age is None and result.ending_balances.total <= DEPLETION_THRESHOLD:
            depletion_age = age
            result = replace(result, ending_balances=AccountBalances.zero(), depleted=True)
            state = replace(state, balances=AccountBalances.zero(), depleted=True)
            logger.info("%s: portfolio depleted at age %d (%d)", inputs.name, age, result.year)
        logger.debug(
            "%s: age %d ending balance %.2f, withdrawals %.2f, tax %.2f",
            inputs.name,
            age,
            result.ending_balances.total,
            result.withdrawals.total,
            result.tax.total,
        )
        years.append(result)

    return _aggregate(inputs, years, depletion_age)


def project_scenario(
    inputs: ScenarioInputs,
    provider: TaxDataProvider,
    tax_year: int = BASE_TAX_YEAR,
) -> CalculationResults:
    """Validate, load tax tables once, then run the projection."""
    validation = validate_scenario(inputs)
    if not validation.is_valid:
        raise ScenarioValidationError(validation.errors)
    tables = load_snapshot(provider, inputs.province, tax_year)
    return run_projection(inputs, tables)


def compare_scenarios(
    scenarios: Iterable[ScenarioInputs],
    provider: TaxDataProvider,
    tax_year: int = BASE_TAX_YEAR,
) -> list[CalculationResults]:
    """Run several scenarios, sharing one snapshot per province."""
    snapshots: dict[str, TaxTableSnapshot] = {}
    results: list[CalculationResults] = []
    for scenario in scenarios:
        validation = validate_scenario(scenario)
        if not validation.is_valid:
            raise ScenarioValidationError(validation.errors)
        if scenario.province not in snapshots:
            snapshots[scenario.province] = load_snapshot(provider, scenario.province, tax_year)
        results.append(run_projection(scenario, snapshots[scenario.province]))
    return results
