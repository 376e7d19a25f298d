"""CPP and OAS benefit modeling, including the OAS recovery-tax clawback."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .provider import BenefitReferenceAmounts

REFERENCE_AGE: Final[int] = 65
CPP_EARLY_REDUCTION_PER_MONTH: Final[float] = 0.006
CPP_DELAY_INCREASE_PER_MONTH: Final[float] = 0.007
OAS_DELAY_INCREASE_PER_MONTH: Final[float] = 0.006


class BenefitKind(str, Enum):
    CPP = "cpp"
    OAS = "oas"


# Inclusive start-age windows.
START_AGE_WINDOWS: Final[dict[BenefitKind, tuple[int, int]]] = {
    BenefitKind.CPP: (60, 70),
    BenefitKind.OAS: (65, 70),
}


def check_start_age(kind: BenefitKind, start_age: int) -> None:
    low, high = START_AGE_WINDOWS[kind]
    if not low <= start_age <= high:
        raise ValueError(f"{kind.name} start age must be between {low} and {high}, got {start_age}")


def adjustment_factor(kind: BenefitKind, start_age: int) -> float:
    """Return the multiplier applied to the age-65 amount for a given start age.

    CPP is reduced 0.6% per month before 65 and increased 0.7% per month after.
    OAS can only be deferred and gains 0.6% per month.
    """
    check_start_age(kind, start_age)
    months = (start_age - REFERENCE_AGE) * 12
    if months == 0:
        return 1.0
    if kind is BenefitKind.CPP:
        if months < 0:
            return 1.0 + months * CPP_EARLY_REDUCTION_PER_MONTH
        return 1.0 + months * CPP_DELAY_INCREASE_PER_MONTH
    return 1.0 + months * OAS_DELAY_INCREASE_PER_MONTH


def annual_benefit(kind: BenefitKind, monthly_amount_at_65: float, start_age: int) -> float:
    return max(0.0, monthly_amount_at_65) * adjustment_factor(kind, start_age) * 12


def indexed_benefit(annual_at_start: float, start_age: int, age: int, inflation_rate: float) -> float:
    if age < start_age:
        return 0.0
    return annual_at_start * ((1.0 + inflation_rate) ** (age - start_age))


@dataclass(frozen=True, slots=True)
class ClawbackThresholds:
    lower: float
    upper: float
    rate: float

    @classmethod
    def from_reference(cls, benefits: BenefitReferenceAmounts) -> "ClawbackThresholds":
        return cls(
            lower=benefits.oas_clawback_threshold,
            upper=benefits.oas_clawback_upper,
            rate=benefits.oas_clawback_rate,
        )

    def indexed(self, years: int, inflation_rate: float) -> "ClawbackThresholds":
        factor = (1.0 + inflation_rate) ** max(0, years)
        return ClawbackThresholds(lower=self.lower * factor, upper=self.upper * factor, rate=self.rate)


def apply_clawback(amount: float, net_income: float, thresholds: ClawbackThresholds) -> float:
    """Return the benefit left after the income-tested recovery tax."""
    if amount <= 0:
        return 0.0
    if net_income >= thresholds.upper:
        return 0.0
    reduction = max(0.0, (net_income - thresholds.lower) * thresholds.rate)
    return amount - min(amount, reduction)


def estimate_cpp_from_earnings(average_earnings: float, benefits: BenefitReferenceAmounts) -> float:
    """Rough monthly CPP at 65 from average career earnings relative to the YMPE."""
    if average_earnings <= 0 or benefits.ympe <= 0:
        return 0.0
    ratio = min(1.0, average_earnings / benefits.ympe)
    return benefits.cpp_max_monthly_at_65 * ratio


@dataclass(frozen=True, slots=True)
class StartAgeComparison:
    best_age: int
    lifetime_totals: dict[int, float]


def optimal_start_age(kind: BenefitKind, monthly_amount_at_65: float, longevity_age: int) -> StartAgeComparison:
    """Compare undiscounted lifetime benefits for every allowed start age.

    Payments are counted for each age from the start age through the
    longevity age inclusive. Ties go to the earlier start age.
    """
    low, high = START_AGE_WINDOWS[kind]
    totals: dict[int, float] = {}
    for start_age in range(low, high + 1):
        years = max(0, longevity_age - start_age + 1)
        totals[start_age] = annual_benefit(kind, monthly_amount_at_65, start_age) * years

    best_age = low
    for start_age, total in totals.items():
        if total > totals[best_age]:
            best_age = start_age
    return StartAgeComparison(best_age=best_age, lifetime_totals=totals)
