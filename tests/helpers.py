import copy
from dataclasses import replace
import json
from pathlib import Path

from canretire.provider import (
    BenefitReferenceAmounts,
    CreditDefinition,
    ReferenceTaxDataProvider,
    TaxTableSnapshot,
)
from canretire.schema import (
    AccountInputs,
    Answer,
    Assets,
    Assumptions,
    ExpensePlan,
    IncomeSources,
    ScenarioInputs,
)


def write_scenario(tmp_path: Path, data: dict, filename: str = "scenario.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_scenario(data: dict) -> dict:
    return copy.deepcopy(data)


def flat_snapshot(**overrides) -> TaxTableSnapshot:
    """Single-rate tables with no credits so expected tax is easy to compute by hand."""
    snapshot = TaxTableSnapshot(
        base_year=2025,
        province="ON",
        federal_brackets=((None, 0.10),),
        provincial_brackets=((None, 0.05),),
        federal_credits=CreditDefinition(basic_personal_amount=0.0),
        provincial_credits=CreditDefinition(basic_personal_amount=0.0),
        benefits=BenefitReferenceAmounts(
            cpp_max_monthly_at_65=1_433.0,
            oas_max_monthly_at_65=727.67,
            ympe=71_300.0,
            oas_clawback_threshold=93_454.0,
            oas_clawback_upper=151_668.0,
            oas_clawback_rate=0.15,
        ),
        rrif_schedule=ReferenceTaxDataProvider().minimum_withdrawal_schedule(),
    )
    return replace(snapshot, **overrides)


def make_scenario(
    rrsp: float = 300_000.0,
    tfsa: float = 50_000.0,
    non_registered: float = 100_000.0,
    **overrides,
) -> ScenarioInputs:
    scenario = ScenarioInputs(
        name="Test",
        current_age=60,
        retirement_age=65,
        longevity_age=90,
        province="ON",
        start_year=2025,
        assets=Assets(
            rrsp=AccountInputs(balance=Answer.valued(rrsp)),
            tfsa=AccountInputs(balance=Answer.valued(tfsa)),
            non_registered=AccountInputs(balance=Answer.valued(non_registered)),
        ),
        income_sources=IncomeSources(),
        expenses=ExpensePlan(fixed_monthly=3_000.0, indexed_to_inflation=False),
        assumptions=Assumptions(pre_retirement_return=0.05, post_retirement_return=0.04, inflation_rate=0.02),
    )
    return replace(scenario, **overrides)
