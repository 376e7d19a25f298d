"""Tax-data provider contract and the per-run snapshot of tax tables.

The engine never reads ``tax_data`` directly. A caller obtains a
:class:`TaxTableSnapshot` once, through a :class:`TaxDataProvider`, and
passes it to every simulated year. Any lookup failure raises
:class:`TaxDataError`; nothing is ever substituted with guessed figures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
import logging
from typing import Final, Protocol

from . import tax_data

logger = logging.getLogger(__name__)

# Caching layers in front of a provider may reuse a snapshot this long.
FRESHNESS_WINDOW: Final[timedelta] = timedelta(hours=24)

Brackets = tuple[tuple[float | None, float], ...]


class TaxDataError(RuntimeError):
    """Raised when tax, benefit or RRIF reference data is unavailable or malformed."""


@dataclass(frozen=True, slots=True)
class AgeAmount:
    max_amount: float
    income_threshold: float
    reduction_rate: float
    eligible_age: int = 65

    def scaled(self, factor: float) -> "AgeAmount":
        return AgeAmount(
            max_amount=self.max_amount * factor,
            income_threshold=self.income_threshold * factor,
            reduction_rate=self.reduction_rate,
            eligible_age=self.eligible_age,
        )


@dataclass(frozen=True, slots=True)
class CreditDefinition:
    basic_personal_amount: float
    age_amount: AgeAmount | None = None

    def scaled(self, factor: float) -> "CreditDefinition":
        return CreditDefinition(
            basic_personal_amount=self.basic_personal_amount * factor,
            age_amount=None if self.age_amount is None else self.age_amount.scaled(factor),
        )


@dataclass(frozen=True, slots=True)
class BenefitReferenceAmounts:
    cpp_max_monthly_at_65: float
    oas_max_monthly_at_65: float
    ympe: float
    oas_clawback_threshold: float
    oas_clawback_upper: float
    oas_clawback_rate: float


@dataclass(frozen=True, slots=True)
class MinimumWithdrawalSchedule:
    """Age-indexed RRIF minimum percentages plus the regime thresholds."""

    percentages: dict[int, float]
    first_age: int
    terminal_age: int
    conversion_age: int

    def __post_init__(self) -> None:
        if self.first_age > self.terminal_age:
            raise TaxDataError("RRIF schedule: first_age must be <= terminal_age")
        missing = [age for age in range(self.first_age, self.terminal_age + 1) if age not in self.percentages]
        if missing:
            raise TaxDataError(f"RRIF schedule: missing percentages for ages {missing}")

    @property
    def terminal_percentage(self) -> float:
        return self.percentages[self.terminal_age]


@dataclass(frozen=True, slots=True)
class TaxTableSnapshot:
    base_year: int
    province: str
    federal_brackets: Brackets
    provincial_brackets: Brackets
    federal_credits: CreditDefinition
    provincial_credits: CreditDefinition
    benefits: BenefitReferenceAmounts
    rrif_schedule: MinimumWithdrawalSchedule = field(repr=False)


class TaxDataProvider(Protocol):
    def federal_brackets(self, year: int) -> Brackets: ...

    def provincial_brackets(self, province: str, year: int) -> Brackets: ...

    def federal_credits(self, year: int) -> CreditDefinition: ...

    def provincial_credits(self, province: str, year: int) -> CreditDefinition: ...

    def benefit_amounts(self, year: int) -> BenefitReferenceAmounts: ...

    def minimum_withdrawal_schedule(self) -> MinimumWithdrawalSchedule: ...


def _credit_from_table(row: dict[str, float]) -> CreditDefinition:
    age_amount = None
    if "age_amount" in row:
        age_amount = AgeAmount(
            max_amount=row["age_amount"],
            income_threshold=row["age_amount_threshold"],
            reduction_rate=row["age_amount_reduction_rate"],
        )
    return CreditDefinition(basic_personal_amount=row["basic_personal_amount"], age_amount=age_amount)


class ReferenceTaxDataProvider:
    """Serves the bundled tables in :mod:`canretire.tax_data`."""

    def _year_entry(self, table: dict, year: int, label: str):
        if year not in table:
            raise TaxDataError(f"{label}: no data for tax year {year}")
        return table[year]

    def _province_entry(self, table: dict, province: str, year: int, label: str):
        by_province = self._year_entry(table, year, label)
        if province not in by_province:
            raise TaxDataError(f"{label}: no data for province {province} in {year}")
        return by_province[province]

    def federal_brackets(self, year: int) -> Brackets:
        return tuple(self._year_entry(tax_data.FEDERAL_BRACKETS, year, "federal brackets"))

    def provincial_brackets(self, province: str, year: int) -> Brackets:
        return tuple(self._province_entry(tax_data.PROVINCIAL_BRACKETS, province, year, "provincial brackets"))

    def federal_credits(self, year: int) -> CreditDefinition:
        return _credit_from_table(self._year_entry(tax_data.FEDERAL_CREDITS, year, "federal credits"))

    def provincial_credits(self, province: str, year: int) -> CreditDefinition:
        return _credit_from_table(self._province_entry(tax_data.PROVINCIAL_CREDITS, province, year, "provincial credits"))

    def benefit_amounts(self, year: int) -> BenefitReferenceAmounts:
        row = self._year_entry(tax_data.BENEFIT_AMOUNTS, year, "benefit amounts")
        return BenefitReferenceAmounts(**row)

    def minimum_withdrawal_schedule(self) -> MinimumWithdrawalSchedule:
        return MinimumWithdrawalSchedule(
            percentages=dict(tax_data.RRIF_MINIMUM_PERCENTAGES),
            first_age=tax_data.RRIF_FIRST_AGE,
            terminal_age=tax_data.RRIF_TERMINAL_AGE,
            conversion_age=tax_data.RRIF_CONVERSION_AGE,
        )


def load_snapshot(provider: TaxDataProvider, province: str, year: int = tax_data.BASE_TAX_YEAR) -> TaxTableSnapshot:
    """Fetch every table a run needs, once, before any year is simulated."""
    snapshot = TaxTableSnapshot(
        base_year=year,
        province=province,
        federal_brackets=provider.federal_brackets(year),
        provincial_brackets=provider.provincial_brackets(province, year),
        federal_credits=provider.federal_credits(year),
        provincial_credits=provider.provincial_credits(province, year),
        benefits=provider.benefit_amounts(year),
        rrif_schedule=provider.minimum_withdrawal_schedule(),
    )
    if not snapshot.federal_brackets or not snapshot.provincial_brackets:
        raise TaxDataError(f"tax brackets for {province} {year} are empty")
    logger.debug("Loaded tax tables for %s (%d)", province, year)
    return snapshot
