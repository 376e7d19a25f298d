from canretire.optimizer import optimize_spending_to_exhaust
from canretire.schema import Assumptions, ExpensePlan
from canretire.simulation import run_projection
from tests.helpers import flat_snapshot, make_scenario


def _tfsa_only(monthly: float):
    return make_scenario(
        rrsp=0,
        tfsa=500_000,
        non_registered=0,
        current_age=64,
        expenses=ExpensePlan(fixed_monthly=monthly, indexed_to_inflation=False),
        assumptions=Assumptions(pre_retirement_return=0.0, post_retirement_return=0.0, inflation_rate=0.0),
    )


def test_finds_spending_that_lasts_to_longevity():
    baseline = _tfsa_only(1_000)
    result = optimize_spending_to_exhaust(baseline, flat_snapshot())

    assert result.converged
    assert 1_570 <= result.optimized_monthly <= 1_667
    assert result.iterations <= 15


def test_depleting_baseline_searches_for_sustainable_spending():
    baseline = _tfsa_only(2_500)
    assert run_projection(baseline, flat_snapshot()).depletion_age == 81

    result = optimize_spending_to_exhaust(baseline, flat_snapshot())

    assert result.optimized_monthly < 2_500
    assert abs(result.optimized_monthly - 500_000 / 300) < 10
    assert "age 81" in result.message


def test_iteration_cap_is_honoured():
    result = optimize_spending_to_exhaust(_tfsa_only(1_000), flat_snapshot(), tolerance=0.0, max_iterations=3)
    assert result.iterations <= 3
