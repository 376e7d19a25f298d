import pytest

from canretire.provider import AgeAmount, CreditDefinition
from canretire.tax import (
    YearIncome,
    compute_jurisdiction_tax,
    compute_tax,
    credit_base,
    progressive_tax,
    taxable_income,
)

TWO_BRACKETS = ((10_000.0, 0.10), (None, 0.20))


@pytest.mark.parametrize(
    ("amount", "expected_tax", "expected_marginal"),
    [
        (0, 0.0, 0.10),
        (5_000, 500.0, 0.10),
        (10_000, 1_000.0, 0.10),
        (15_000, 2_000.0, 0.20),
    ],
)
def test_progressive_tax(amount, expected_tax, expected_marginal):
    tax, marginal = progressive_tax(amount, TWO_BRACKETS)
    assert round(tax, 2) == expected_tax
    assert marginal == expected_marginal


@pytest.mark.parametrize(
    ("age", "income", "expected"),
    [
        (64, 50_000, 10_000.0),
        (65, 30_000, 15_000.0),
        (65, 50_000, 13_500.0),
        (70, 80_000, 10_000.0),
    ],
)
def test_credit_base_phases_out_age_amount(age, income, expected):
    credits = CreditDefinition(
        basic_personal_amount=10_000,
        age_amount=AgeAmount(max_amount=5_000, income_threshold=40_000, reduction_rate=0.15),
    )
    assert round(credit_base(credits, income, age), 2) == expected


def test_credits_apply_at_lowest_rate():
    result = compute_jurisdiction_tax(15_000, TWO_BRACKETS, CreditDefinition(basic_personal_amount=10_000), 40)
    assert round(result.gross_tax, 2) == 2_000.0
    assert round(result.credits, 2) == 1_000.0
    assert round(result.total, 2) == 1_000.0


def test_credits_never_make_tax_negative():
    result = compute_jurisdiction_tax(5_000, TWO_BRACKETS, CreditDefinition(basic_personal_amount=10_000), 40)
    assert result.total == 0.0


def test_taxable_income_includes_half_of_gains_and_excludes_tfsa():
    income = YearIncome(rrsp_rrif=10_000, tfsa=50_000, capital_gains=20_000, cpp=5_000, pension=1_000)
    assert taxable_income(income) == 26_000.0


def test_compute_tax_ontario_base_year(ontario_tables):
    result = compute_tax(50_000, age=60, year=2025, tables=ontario_tables, inflation_rate=0.02)

    assert round(result.federal.total, 2) == 5_080.65
    assert round(result.provincial.total, 2) == 1_881.28
    assert round(result.total, 2) == 6_961.93
    assert round(result.marginal_rate, 4) == 0.2005
    assert round(result.effective_rate, 4) == round(result.total / 50_000, 4)


def test_age_amount_lowers_tax_for_seniors(ontario_tables):
    younger = compute_tax(50_000, age=60, year=2025, tables=ontario_tables)
    older = compute_tax(50_000, age=70, year=2025, tables=ontario_tables)
    assert older.total < younger.total


def test_brackets_index_forward_from_base_year(ontario_tables):
    base = compute_tax(80_000, age=60, year=2025, tables=ontario_tables, inflation_rate=0.02)
    later = compute_tax(80_000, age=60, year=2035, tables=ontario_tables, inflation_rate=0.02)
    earlier = compute_tax(80_000, age=60, year=2020, tables=ontario_tables, inflation_rate=0.02)

    assert later.total < base.total
    assert earlier.total == base.total


def test_zero_income_has_zero_tax(ontario_tables):
    result = compute_tax(0, age=72, year=2030, tables=ontario_tables)
    assert result.total == 0.0
    assert result.effective_rate == 0.0
