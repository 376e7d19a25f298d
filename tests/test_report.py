import json

import pytest

from canretire.report import (
    CONCERNING,
    DEPLETED,
    SUFFICIENT,
    milestones,
    render_text,
    results_to_dict,
    summarize,
    tax_summary,
    write_json,
)
from canretire.schema import CPPInputs, ExpensePlan, IncomeSources, OASInputs
from canretire.simulation import run_projection
from tests.helpers import flat_snapshot, make_scenario


def _results(**overrides):
    return run_projection(make_scenario(**overrides), flat_snapshot())


def test_summary_for_comfortable_scenario():
    results = _results(expenses=ExpensePlan(fixed_monthly=1_000, indexed_to_inflation=False))
    summary = summarize(results)

    assert summary.success_indicator == SUFFICIENT
    assert summary.retirement_age == 65
    assert summary.years_in_retirement == 25
    assert summary.starting_assets == 450_000
    first = results.retirement_years[0]
    assert summary.monthly_after_tax_income == pytest.approx((first.income.total - first.tax.total) / 12)


def test_summary_flags_depletion():
    results = _results(rrsp=0, tfsa=50_000, non_registered=0)
    assert summarize(results).success_indicator == DEPLETED


def test_summary_flags_low_ending_balance():
    results = _results(expenses=ExpensePlan(fixed_monthly=2_780, indexed_to_inflation=False))
    assert results.depletion_age is None
    assert results.final_balance < 450_000 * 0.3
    assert summarize(results).success_indicator == CONCERNING


def test_tax_summary_covers_retirement_years_only():
    results = _results()
    taxes = tax_summary(results)
    retirement = results.retirement_years

    assert taxes.total_tax_paid == pytest.approx(sum(item.tax.total for item in retirement))
    assert taxes.net_income == pytest.approx(taxes.gross_income - taxes.total_tax_paid)
    assert taxes.annual_estimate == pytest.approx(taxes.total_tax_paid / len(retirement))
    assert 0 <= taxes.effective_rate <= 0.15


def test_milestones_mark_first_years():
    results = _results(
        income_sources=IncomeSources(
            cpp=CPPInputs(start_age=62, monthly_amount_at_65=1_000),
            oas=OASInputs(start_age=67, monthly_amount=700),
        ),
    )
    events = milestones(results)

    assert events[62] == ["CPP Starts"]
    assert events[67] == ["OAS Starts"]
    assert events[71] == ["RRIF Conversion"]
    assert 60 not in events


def test_render_text_lists_every_year():
    results = _results()
    text = render_text(results)

    assert "Scenario: Test" in text
    assert "Outcome:" in text
    assert text.count("\n") >= len(results.years)


def test_results_dict_is_json_serializable(tmp_path):
    results = _results()
    data = results_to_dict(results)

    assert data["years"][0]["ending_balances"]["total"] == results.years[0].ending_balances.total
    assert data["milestones"]["71"] == ["RRIF Conversion"]
    json.dumps(data)

    path = tmp_path / "out" / "results.json"
    write_json(path, results)
    written = json.loads(path.read_text(encoding="utf-8"))
    assert written["scenario_name"] == "Test"
    assert len(written["years"]) == len(results.years)
