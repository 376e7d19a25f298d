"""Federal and provincial income tax computation."""

from __future__ import annotations

from dataclasses import dataclass

from .provider import Brackets, CreditDefinition, TaxTableSnapshot
from .tax_data import CAPITAL_GAINS_INCLUSION_RATE, DEFAULT_BRACKET_INFLATION


@dataclass(frozen=True, slots=True)
class YearIncome:
    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    capital_gains: float = 0.0
    cpp: float = 0.0
    oas: float = 0.0
    pension: float = 0.0
    other: float = 0.0


@dataclass(frozen=True, slots=True)
class JurisdictionTax:
    gross_tax: float
    credits: float
    total: float
    marginal_rate: float


@dataclass(frozen=True, slots=True)
class TaxResult:
    federal: JurisdictionTax
    provincial: JurisdictionTax
    total: float
    taxable_income: float
    marginal_rate: float
    effective_rate: float


def taxable_income(sources: YearIncome, inclusion_rate: float = CAPITAL_GAINS_INCLUSION_RATE) -> float:
    """Sum the taxable portion of a year's income. TFSA withdrawals are never included."""
    return (
        sources.rrsp_rrif
        + sources.capital_gains * inclusion_rate
        + sources.cpp
        + sources.oas
        + sources.pension
        + sources.other
    )


def _year_factor(year: int, base_year: int, inflation_rate: float) -> float:
    delta = max(0, year - base_year)
    return (1.0 + inflation_rate) ** delta


def _indexed_brackets(brackets: Brackets, factor: float) -> Brackets:
    return tuple((None if upper is None else upper * factor, rate) for upper, rate in brackets)


def progressive_tax(amount: float, brackets: Brackets) -> tuple[float, float]:
    """Return (tax, marginal_rate) for ``amount`` across ordered brackets."""
    if not brackets:
        return 0.0, 0.0
    if amount <= 0:
        return 0.0, brackets[0][1]

    remaining = amount
    lower = 0.0
    tax = 0.0
    marginal = brackets[0][1]
    for upper, rate in brackets:
        if remaining <= 0:
            break
        if upper is None:
            taxable_at_rate = remaining
        else:
            span = max(0.0, upper - lower)
            taxable_at_rate = min(remaining, span)
        tax += taxable_at_rate * rate
        remaining -= taxable_at_rate
        if taxable_at_rate > 0:
            marginal = rate
        if upper is None:
            break
        lower = upper
    return max(0.0, tax), marginal


def credit_base(credits: CreditDefinition, income: float, age: int) -> float:
    """Dollar amount eligible for non-refundable credits before applying the lowest rate."""
    amount = credits.basic_personal_amount
    age_amount = credits.age_amount
    if age_amount is not None and age >= age_amount.eligible_age:
        reduction = max(0.0, income - age_amount.income_threshold) * age_amount.reduction_rate
        amount += max(0.0, age_amount.max_amount - reduction)
    return amount


def compute_jurisdiction_tax(taxable: float, brackets: Brackets, credits: CreditDefinition, age: int) -> JurisdictionTax:
    gross, marginal = progressive_tax(taxable, brackets)
    lowest_rate = min(rate for _, rate in brackets)
    credit_value = credit_base(credits, taxable, age) * lowest_rate
    return JurisdictionTax(
        gross_tax=gross,
        credits=credit_value,
        total=max(0.0, gross - credit_value),
        marginal_rate=marginal,
    )


def compute_tax(
    taxable: float,
    *,
    age: int,
    year: int,
    tables: TaxTableSnapshot,
    inflation_rate: float = DEFAULT_BRACKET_INFLATION,
) -> TaxResult:
    factor = _year_factor(year, tables.base_year, inflation_rate)
    federal = compute_jurisdiction_tax(
        taxable,
        _indexed_brackets(tables.federal_brackets, factor),
        tables.federal_credits.scaled(factor),
        age,
    )
    provincial = compute_jurisdiction_tax(
        taxable,
        _indexed_brackets(tables.provincial_brackets, factor),
        tables.provincial_credits.scaled(factor),
        age,
    )
    total = federal.total + provincial.total
    return TaxResult(
        federal=federal,
        provincial=provincial,
        total=total,
        taxable_income=max(0.0, taxable),
        marginal_rate=federal.marginal_rate + provincial.marginal_rate,
        effective_rate=total / taxable if taxable > 0 else 0.0,
    )
