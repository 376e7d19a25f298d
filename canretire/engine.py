"""Core year-by-year deterministic simulation step."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .accounts import AccountBalances, project_growth
from .benefits import BenefitKind, ClawbackThresholds, annual_benefit, apply_clawback, indexed_benefit
from .cost_basis import CostBasisTracker
from .provider import TaxTableSnapshot
from .rrif import mandatory_regime_active
from .schema import ExpensePlan, IncomeStream, ScenarioInputs
from .tax import TaxResult, YearIncome, compute_tax, taxable_income
from .withdrawals import WithdrawalPlan, sequence_withdrawals

ACCUMULATION: Final[str] = "accumulation"
RETIREMENT: Final[str] = "retirement"


@dataclass(frozen=True, slots=True)
class AccountState:
    balances: AccountBalances
    non_registered_basis: float | None = None
    depleted: bool = False

    @classmethod
    def seed(cls, inputs: ScenarioInputs) -> "AccountState":
        assets = inputs.assets
        basis = assets.non_registered.cost_basis
        return cls(
            balances=AccountBalances(
                rrsp_rrif=assets.rrsp.balance.or_zero(),
                tfsa=assets.tfsa.balance.or_zero(),
                non_registered=assets.non_registered.balance.or_zero(),
            ),
            non_registered_basis=basis.amount if basis.is_valued else None,
        )

    def cost_basis_tracker(self) -> CostBasisTracker | None:
        if self.non_registered_basis is None:
            return None
        return CostBasisTracker(total_basis=self.non_registered_basis)


@dataclass(frozen=True, slots=True)
class IncomeBreakdown:
    cpp: float = 0.0
    oas: float = 0.0
    oas_clawback: float = 0.0
    pension: float = 0.0
    other: float = 0.0
    withdrawals: float = 0.0
    total: float = 0.0


@dataclass(frozen=True, slots=True)
class TaxBreakdown:
    federal: float = 0.0
    provincial: float = 0.0
    total: float = 0.0
    taxable_income: float = 0.0
    effective_rate: float = 0.0
    marginal_rate: float = 0.0

    @classmethod
    def from_result(cls, result: TaxResult) -> "TaxBreakdown":
        return cls(
            federal=result.federal.total,
            provincial=result.provincial.total,
            total=result.total,
            taxable_income=result.taxable_income,
            effective_rate=result.effective_rate,
            marginal_rate=result.marginal_rate,
        )


@dataclass(frozen=True, slots=True)
class YearResult:
    age: int
    year: int
    phase: str
    starting_balances: AccountBalances
    ending_balances: AccountBalances
    contributions: AccountBalances
    investment_returns: float
    withdrawals: WithdrawalPlan
    income: IncomeBreakdown
    tax: TaxBreakdown
    expenses: float
    net_cash_flow: float
    rrif_minimum_active: bool
    depleted: bool = False


def calendar_year(inputs: ScenarioInputs, tables: TaxTableSnapshot, age: int) -> int:
    start_year = inputs.start_year if inputs.start_year is not None else tables.base_year
    return start_year + (age - inputs.current_age)


def annual_expenses(plan: ExpensePlan, age: int, retirement_age: int, inflation_rate: float) -> float:
    """Spending need for ``age``.

    The base level is ``fixed_monthly * 12 + variable_annual`` from the
    retirement age. An age-based change replaces it with ``monthly_amount * 12``
    from the change age onward; the latest change at or before ``age`` wins.
    Indexed plans grow with inflation from whichever age set the level.
    """
    if age < retirement_age:
        return 0.0

    level = plan.fixed_monthly * 12 + plan.variable_annual
    anchor = retirement_age
    for change in sorted(plan.age_based_changes, key=lambda item: item.age):
        if retirement_age <= change.age <= age:
            level = change.monthly_amount * 12
            anchor = change.age

    if plan.indexed_to_inflation:
        level *= (1.0 + inflation_rate) ** (age - anchor)
    return max(0.0, level)


def stream_amount(stream: IncomeStream, age: int, default_start_age: int, inflation_rate: float) -> float:
    start_age = stream.start_age if stream.start_age is not None else default_start_age
    if age < start_age:
        return 0.0
    if stream.end_age is not None and age > stream.end_age:
        return 0.0
    if stream.indexed_to_inflation:
        return stream.annual_amount * ((1.0 + inflation_rate) ** (age - start_age))
    return stream.annual_amount


def _benefit_income(inputs: ScenarioInputs, age: int) -> tuple[float, float]:
    sources = inputs.income_sources
    inflation = inputs.assumptions.inflation_rate
    cpp = 0.0
    oas = 0.0
    if sources.cpp is not None:
        base = annual_benefit(BenefitKind.CPP, sources.cpp.monthly_amount_at_65, sources.cpp.start_age)
        cpp = indexed_benefit(base, sources.cpp.start_age, age, inflation)
    if sources.oas is not None:
        base = annual_benefit(BenefitKind.OAS, sources.oas.monthly_amount, sources.oas.start_age)
        oas = indexed_benefit(base, sources.oas.start_age, age, inflation)
    return cpp, oas


def _stream_total(streams: tuple[IncomeStream, ...], age: int, inputs: ScenarioInputs) -> float:
    return sum(
        stream_amount(stream, age, inputs.retirement_age, inputs.assumptions.inflation_rate)
        for stream in streams
    )


def simulate_year(
    state: AccountState,
    age: int,
    inputs: ScenarioInputs,
    tables: TaxTableSnapshot,
) -> tuple[YearResult, AccountState]:
    """Advance the portfolio by one year and describe what happened in it.

    Before retirement the accounts only receive contributions and growth,
    except that an active RRIF regime still forces its minimum out. From the
    retirement age the year's need is netted against guaranteed income and
    the residual is withdrawn, taxed, and the remaining balances grown.
    """
    schedule = tables.rrif_schedule
    assumptions = inputs.assumptions
    inflation = assumptions.inflation_rate
    year = calendar_year(inputs, tables, age)
    retired = age >= inputs.retirement_age
    regime_active = mandatory_regime_active(age, schedule)
    start = state.balances

    cpp, oas_gross = _benefit_income(inputs, age)
    pension = _stream_total(inputs.income_sources.pensions, age, inputs)
    other = _stream_total(inputs.income_sources.other_income, age, inputs)
    guaranteed = cpp + oas_gross + pension + other

    tracker = state.cost_basis_tracker()
    if retired:
        expenses = annual_expenses(inputs.expenses, age, inputs.retirement_age, inflation)
        target = max(0.0, expenses - guaranteed)
        contributions = AccountBalances.zero()
        rate = assumptions.post_retirement_return
        plan = sequence_withdrawals(target, start, age, schedule=schedule, cost_basis=tracker)
    else:
        expenses = 0.0
        assets = inputs.assets
        contributions = AccountBalances(
            rrsp_rrif=0.0 if regime_active else max(0.0, assets.rrsp.annual_contribution),
            tfsa=max(0.0, assets.tfsa.annual_contribution),
            non_registered=max(0.0, assets.non_registered.annual_contribution),
        )
        rate = assumptions.pre_retirement_return
        if regime_active:
            plan = sequence_withdrawals(0.0, start, age, schedule=schedule, cost_basis=tracker)
        else:
            plan = WithdrawalPlan.empty()

    oas = oas_gross
    oas_clawback = 0.0
    tax = TaxBreakdown()
    if retired or plan.total > 0:
        net_income = taxable_income(
            YearIncome(
                rrsp_rrif=plan.rrsp_rrif,
                tfsa=plan.tfsa,
                capital_gains=plan.capital_gains,
                cpp=cpp,
                oas=oas_gross,
                pension=pension,
                other=other,
            )
        )
        thresholds = ClawbackThresholds.from_reference(tables.benefits).indexed(year - tables.base_year, inflation)
        oas = apply_clawback(oas_gross, net_income, thresholds)
        oas_clawback = oas_gross - oas
        tax = TaxBreakdown.from_result(
            compute_tax(net_income - oas_clawback, age=age, year=year, tables=tables, inflation_rate=inflation)
        )

    # A forced minimum while still working is not spent; its after-tax cash
    # moves into the non-registered account.
    reinvested = 0.0 if retired else max(0.0, plan.total - tax.total)

    rrsp = project_growth(start.rrsp_rrif, contributions.rrsp_rrif, plan.rrsp_rrif, rate)
    tfsa = project_growth(start.tfsa, contributions.tfsa, plan.tfsa, rate)
    non_registered = project_growth(
        start.non_registered,
        contributions.non_registered + reinvested,
        plan.non_registered,
        rate,
    )

    if state.depleted:
        ending = AccountBalances.zero()
    else:
        ending = AccountBalances(
            rrsp_rrif=rrsp.ending_balance,
            tfsa=tfsa.ending_balance,
            non_registered=non_registered.ending_balance,
        )

    next_basis = None
    if tracker is not None:
        tracker.reduce_basis(plan.non_registered, start.non_registered)
        tracker.add_basis(contributions.non_registered + reinvested)
        next_basis = tracker.total_basis

    income_total = cpp + oas + pension + other + plan.total
    result = YearResult(
        age=age,
        year=year,
        phase=RETIREMENT if retired else ACCUMULATION,
        starting_balances=start,
        ending_balances=ending,
        contributions=contributions,
        investment_returns=rrsp.investment_return + tfsa.investment_return + non_registered.investment_return,
        withdrawals=plan,
        income=IncomeBreakdown(
            cpp=cpp,
            oas=oas,
            oas_clawback=oas_clawback,
            pension=pension,
            other=other,
            withdrawals=plan.total,
            total=income_total,
        ),
        tax=tax,
        expenses=expenses,
        net_cash_flow=income_total - expenses - tax.total if retired else reinvested,
        rrif_minimum_active=regime_active,
        depleted=state.depleted,
    )
    next_state = AccountState(balances=ending, non_registered_basis=next_basis, depleted=state.depleted)
    return result, next_state
