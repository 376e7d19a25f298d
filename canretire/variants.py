"""What-if scenario builders.

Each builder returns a new :class:`ScenarioInputs` derived from a baseline.
The projection runner has no knowledge of variants; callers simply run the
returned scenario.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Final

from .schema import ScenarioInputs, SpendingChange

# (years after retirement, multiplier on baseline fixed_monthly)
FRONT_LOAD_PHASES: Final[tuple[tuple[int, float], ...]] = (
    (0, 1.30),
    (10, 0.85),
    (20, 0.75),
)
DELAYED_BENEFIT_START_AGE: Final[int] = 70
DEFAULT_YEARS_EARLIER: Final[int] = 3


class VariantKind(str, Enum):
    FRONT_LOAD = "front_load"
    DELAY_BENEFITS = "delay_benefits"
    RETIRE_EARLY = "retire_early"


@dataclass(frozen=True, slots=True)
class VariantSpec:
    kind: VariantKind
    years_earlier: int = DEFAULT_YEARS_EARLIER
    name: str | None = None


def front_load_spending(baseline: ScenarioInputs) -> ScenarioInputs:
    monthly = baseline.expenses.fixed_monthly
    changes = tuple(
        SpendingChange(age=baseline.retirement_age + offset, monthly_amount=monthly * multiplier)
        for offset, multiplier in FRONT_LOAD_PHASES
    )
    return replace(
        baseline,
        name="Front-Load the Fun",
        expenses=replace(baseline.expenses, age_based_changes=changes),
    )


def delay_benefits(baseline: ScenarioInputs) -> ScenarioInputs:
    sources = baseline.income_sources
    cpp = None if sources.cpp is None else replace(sources.cpp, start_age=DELAYED_BENEFIT_START_AGE)
    oas = None if sources.oas is None else replace(sources.oas, start_age=DELAYED_BENEFIT_START_AGE)
    return replace(
        baseline,
        name=f"Delay CPP/OAS to {DELAYED_BENEFIT_START_AGE}",
        income_sources=replace(sources, cpp=cpp, oas=oas),
    )


def retire_early(baseline: ScenarioInputs, years_earlier: int = DEFAULT_YEARS_EARLIER) -> ScenarioInputs:
    if years_earlier <= 0:
        raise ValueError("years_earlier must be positive")
    return replace(
        baseline,
        name=f"Retire {years_earlier} Years Earlier",
        retirement_age=baseline.retirement_age - years_earlier,
    )


def build_variant(baseline: ScenarioInputs, request: VariantSpec) -> ScenarioInputs:
    if request.kind is VariantKind.FRONT_LOAD:
        variant = front_load_spending(baseline)
    elif request.kind is VariantKind.DELAY_BENEFITS:
        variant = delay_benefits(baseline)
    elif request.kind is VariantKind.RETIRE_EARLY:
        variant = retire_early(baseline, request.years_earlier)
    else:
        raise ValueError(f"unknown variant kind: {request.kind}")
    if request.name is not None:
        variant = replace(variant, name=request.name)
    return variant
