"""Result summaries, milestones, and text/JSON rendering."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path
from typing import Any, Final

from .accounts import AccountBalances
from .engine import YearResult
from .simulation import CalculationResults

SUFFICIENT: Final[str] = "sufficient"
CONCERNING: Final[str] = "concerning"
DEPLETED: Final[str] = "depleted"

# Ending below this share of the starting portfolio is flagged as concerning.
CONCERNING_BALANCE_RATIO: Final[float] = 0.3


@dataclass(frozen=True, slots=True)
class ResultSummary:
    monthly_after_tax_income: float
    success_indicator: str
    retirement_age: int
    years_in_retirement: int
    starting_assets: float
    ending_balance: float
    depletion_age: int | None


@dataclass(frozen=True, slots=True)
class TaxSummary:
    total_tax_paid: float
    effective_rate: float
    average_marginal_rate: float
    annual_estimate: float
    monthly_net_income: float
    gross_income: float
    net_income: float


def _money(value: float) -> str:
    return f"${value:,.0f}"


def summarize(results: CalculationResults) -> ResultSummary:
    retirement = results.retirement_years
    if not retirement:
        raise ValueError("results contain no retirement years")
    first = retirement[0]
    last = results.years[-1]
    starting_assets = results.years[0].starting_balances.total

    if results.depletion_age is not None:
        indicator = DEPLETED
    elif results.final_balance < starting_assets * CONCERNING_BALANCE_RATIO:
        indicator = CONCERNING
    else:
        indicator = SUFFICIENT

    return ResultSummary(
        monthly_after_tax_income=(first.income.total - first.tax.total) / 12,
        success_indicator=indicator,
        retirement_age=first.age,
        years_in_retirement=last.age - first.age,
        starting_assets=starting_assets,
        ending_balance=results.final_balance,
        depletion_age=results.depletion_age,
    )


def tax_summary(results: CalculationResults) -> TaxSummary:
    retirement = results.retirement_years
    total_tax = sum(item.tax.total for item in retirement)
    gross = sum(item.income.total for item in retirement)
    net = gross - total_tax
    count = len(retirement)
    return TaxSummary(
        total_tax_paid=total_tax,
        effective_rate=total_tax / gross if gross > 0 else 0.0,
        average_marginal_rate=sum(item.tax.marginal_rate for item in retirement) / count if count else 0.0,
        annual_estimate=total_tax / count if count else 0.0,
        monthly_net_income=net / (count * 12) if count else 0.0,
        gross_income=gross,
        net_income=net,
    )


def milestones(results: CalculationResults) -> dict[int, list[str]]:
    """Map ages to the events that begin in that year."""
    found: dict[int, list[str]] = {}
    previous: YearResult | None = None
    for item in results.years:
        labels: list[str] = []
        if item.income.cpp > 0 and (previous is None or previous.income.cpp == 0):
            labels.append("CPP Starts")
        if item.income.oas + item.income.oas_clawback > 0 and (
            previous is None or previous.income.oas + previous.income.oas_clawback == 0
        ):
            labels.append("OAS Starts")
        if item.rrif_minimum_active and previous is not None and not previous.rrif_minimum_active:
            labels.append("RRIF Conversion")
        if item.depleted and (previous is None or not previous.depleted):
            labels.append("Portfolio Depleted")
        if labels:
            found[item.age] = labels
        previous = item
    return found


def render_text(results: CalculationResults) -> str:
    summary = summarize(results)
    taxes = tax_summary(results)
    events = milestones(results)
    lines = [
        f"Scenario: {results.scenario_name}",
        f"Outcome: {summary.success_indicator}",
        f"Monthly after-tax income (first retirement year): {_money(summary.monthly_after_tax_income)}",
        f"Starting assets: {_money(summary.starting_assets)}",
        f"Final balance: {_money(summary.ending_balance)}",
        f"Depletion age: {summary.depletion_age if summary.depletion_age is not None else 'never'}",
        f"Lifetime tax: {_money(results.lifetime_tax_paid)} (effective {taxes.effective_rate:.1%})",
        f"Lifetime CPP: {_money(results.lifetime_cpp)}  Lifetime OAS: {_money(results.lifetime_oas)}",
        "",
        f"{'Age':>4} {'Year':>5} {'Balance':>14} {'Withdrawals':>12} {'Income':>12} {'Tax':>10} {'Net':>10}  Events",
    ]
    for item in results.years:
        lines.append(
            f"{item.age:>4} {item.year:>5} {_money(item.ending_balances.total):>14} "
            f"{_money(item.withdrawals.total):>12} {_money(item.income.total):>12} "
            f"{_money(item.tax.total):>10} {_money(item.net_cash_flow):>10}  {', '.join(events.get(item.age, []))}".rstrip()
        )
    return "\n".join(lines)


def _balances(balances: AccountBalances) -> dict[str, float]:
    data = asdict(balances)
    data["total"] = balances.total
    return data


def results_to_dict(results: CalculationResults) -> dict[str, Any]:
    years = []
    for item in results.years:
        row = asdict(item)
        row["starting_balances"] = _balances(item.starting_balances)
        row["ending_balances"] = _balances(item.ending_balances)
        row["contributions"] = _balances(item.contributions)
        years.append(row)
    return {
        "scenario_name": results.scenario_name,
        "success": results.success,
        "final_balance": results.final_balance,
        "depletion_age": results.depletion_age,
        "lifetime_tax_paid": results.lifetime_tax_paid,
        "lifetime_cpp": results.lifetime_cpp,
        "lifetime_oas": results.lifetime_oas,
        "first_year_after_tax_income": results.first_year_after_tax_income,
        "average_tax_rate_in_retirement": results.average_tax_rate_in_retirement,
        "milestones": {str(age): labels for age, labels in milestones(results).items()},
        "years": years,
    }


def write_json(path: str | Path, results: CalculationResults) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(results_to_dict(results), indent=2), encoding="utf-8")
