import pytest

from canretire.schema import CPPInputs, IncomeSources, OASInputs, SpendingChange, load_scenario
from canretire.simulation import run_projection
from canretire.variants import VariantKind, VariantSpec, build_variant
from tests.helpers import flat_snapshot, make_scenario


def test_front_load_adds_three_spending_phases():
    baseline = load_scenario("sample_scenario.json")
    variant = build_variant(baseline, VariantSpec(kind=VariantKind.FRONT_LOAD))

    assert variant.name == "Front-Load the Fun"
    changes = variant.expenses.age_based_changes
    assert [change.age for change in changes] == [65, 75, 85]
    assert [round(change.monthly_amount, 2) for change in changes] == [5_850.0, 3_825.0, 3_375.0]
    # Baseline is untouched.
    assert baseline.expenses.age_based_changes == (SpendingChange(age=80, monthly_amount=4_000),)


def test_delay_benefits_moves_both_start_ages_to_70():
    baseline = make_scenario(
        income_sources=IncomeSources(
            cpp=CPPInputs(start_age=65, monthly_amount_at_65=1_000),
            oas=OASInputs(start_age=65, monthly_amount=700),
        )
    )
    variant = build_variant(baseline, VariantSpec(kind=VariantKind.DELAY_BENEFITS))

    assert variant.income_sources.cpp.start_age == 70
    assert variant.income_sources.oas.start_age == 70
    assert variant.income_sources.cpp.monthly_amount_at_65 == 1_000
    assert baseline.income_sources.cpp.start_age == 65


def test_delay_benefits_keeps_absent_benefits_absent():
    variant = build_variant(make_scenario(), VariantSpec(kind=VariantKind.DELAY_BENEFITS))
    assert variant.income_sources.cpp is None
    assert variant.income_sources.oas is None


def test_retire_early_shifts_retirement_age():
    baseline = make_scenario()
    variant = build_variant(baseline, VariantSpec(kind=VariantKind.RETIRE_EARLY, years_earlier=2))

    assert variant.retirement_age == 63
    assert variant.name == "Retire 2 Years Earlier"


def test_retire_early_rejects_non_positive_years():
    with pytest.raises(ValueError, match="years_earlier"):
        build_variant(make_scenario(), VariantSpec(kind=VariantKind.RETIRE_EARLY, years_earlier=0))


def test_custom_variant_name():
    variant = build_variant(make_scenario(), VariantSpec(kind=VariantKind.FRONT_LOAD, name="Go-go years"))
    assert variant.name == "Go-go years"


def test_variants_run_through_the_same_runner():
    baseline = make_scenario()
    tables = flat_snapshot()
    base_results = run_projection(baseline, tables)
    early_results = run_projection(build_variant(baseline, VariantSpec(kind=VariantKind.RETIRE_EARLY)), tables)

    assert early_results.years[0].age == base_results.years[0].age
    assert early_results.final_balance < base_results.final_balance
