"""Semantic validation for scenarios, run before any year is simulated."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, Iterable

from .benefits import START_AGE_WINDOWS, BenefitKind
from .schema import AccountInputs, IncomeStream, ScenarioInputs
from .tax_data import BASE_TAX_YEAR, PROVINCE_CODES, PROVINCIAL_BRACKETS

MAX_AGE: Final[int] = 120


class ScenarioValidationError(ValueError):
    """Raised by the projection runner when a scenario fails validation."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_non_negative(result: ValidationResult, path: str, value: float) -> None:
    if value < 0:
        result.errors.append(f"{path}: must be >= 0")


def _check_rate(result: ValidationResult, path: str, value: float) -> None:
    if value <= -1.0:
        result.errors.append(f"{path}: must be greater than -1")


def _check_account(result: ValidationResult, path: str, account: AccountInputs, has_cost_basis: bool) -> None:
    if not account.balance.is_answered:
        result.warnings.append(f"{path}.balance: not provided; treated as 0")
    elif account.balance.is_valued:
        _check_non_negative(result, f"{path}.balance", account.balance.amount)
    _check_non_negative(result, f"{path}.annual_contribution", account.annual_contribution)
    if has_cost_basis:
        if account.cost_basis.is_valued:
            _check_non_negative(result, f"{path}.cost_basis", account.cost_basis.amount)
        elif account.balance.or_zero() > 0:
            result.warnings.append(f"{path}.cost_basis: not provided; withdrawals assumed to be 50% capital gains")


def _check_start_age(result: ValidationResult, path: str, kind: BenefitKind, start_age: int) -> None:
    low, high = START_AGE_WINDOWS[kind]
    if not low <= start_age <= high:
        result.errors.append(f"{path}: must be between {low} and {high}")


def _check_stream(result: ValidationResult, path: str, stream: IncomeStream) -> None:
    _check_non_negative(result, f"{path}.annual_amount", stream.annual_amount)
    if stream.start_age is not None and stream.end_age is not None and stream.end_age < stream.start_age:
        result.errors.append(f"{path}.end_age: must be >= start_age")


def validate_scenario(scenario: ScenarioInputs) -> ValidationResult:
    result = ValidationResult()

    if scenario.current_age < 0:
        result.errors.append("basic_inputs.current_age: must be >= 0")
    if scenario.retirement_age <= scenario.current_age:
        result.errors.append("basic_inputs.retirement_age: must be greater than current_age")
    if scenario.longevity_age <= scenario.retirement_age:
        result.errors.append("basic_inputs.longevity_age: must be greater than retirement_age")
    if scenario.longevity_age > MAX_AGE:
        result.errors.append(f"basic_inputs.longevity_age: must be <= {MAX_AGE}")
    _check_enum(result, "basic_inputs.province", scenario.province, PROVINCE_CODES)
    if scenario.province in PROVINCE_CODES and scenario.province not in PROVINCIAL_BRACKETS.get(BASE_TAX_YEAR, {}):
        result.warnings.append(
            f"basic_inputs.province: no bundled tax tables for {scenario.province} in {BASE_TAX_YEAR}; "
            "the projection cannot load tax data"
        )

    assets = scenario.assets
    _check_account(result, "assets.rrsp", assets.rrsp, has_cost_basis=False)
    _check_account(result, "assets.tfsa", assets.tfsa, has_cost_basis=False)
    _check_account(result, "assets.non_registered", assets.non_registered, has_cost_basis=True)

    sources = scenario.income_sources
    if sources.cpp is not None:
        _check_start_age(result, "income_sources.cpp.start_age", BenefitKind.CPP, sources.cpp.start_age)
        _check_non_negative(result, "income_sources.cpp.monthly_amount_at_65", sources.cpp.monthly_amount_at_65)
    if sources.oas is not None:
        _check_start_age(result, "income_sources.oas.start_age", BenefitKind.OAS, sources.oas.start_age)
        _check_non_negative(result, "income_sources.oas.monthly_amount", sources.oas.monthly_amount)
    for idx, stream in enumerate(sources.pensions):
        _check_stream(result, f"income_sources.pensions[{idx}]", stream)
    for idx, stream in enumerate(sources.other_income):
        _check_stream(result, f"income_sources.other_income[{idx}]", stream)

    expenses = scenario.expenses
    _check_non_negative(result, "expenses.fixed_monthly", expenses.fixed_monthly)
    _check_non_negative(result, "expenses.variable_annual", expenses.variable_annual)
    for idx, change in enumerate(expenses.age_based_changes):
        path = f"expenses.age_based_changes[{idx}]"
        _check_non_negative(result, f"{path}.monthly_amount", change.monthly_amount)
        if not scenario.retirement_age <= change.age <= scenario.longevity_age:
            result.warnings.append(f"{path}.age: outside retirement years; change is ignored")

    assumptions = scenario.assumptions
    _check_rate(result, "assumptions.pre_retirement_return", assumptions.pre_retirement_return)
    _check_rate(result, "assumptions.post_retirement_return", assumptions.post_retirement_return)
    _check_rate(result, "assumptions.inflation_rate", assumptions.inflation_rate)

    return result
