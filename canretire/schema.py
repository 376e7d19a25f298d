"""Scenario schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
from pathlib import Path
from typing import Any


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaError(f"{path}: expected number")
    return float(value)


def _integer(value: Any, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"{path}: expected integer")
    return value


def _optional_integer(data: dict[str, Any], key: str, path: str) -> int | None:
    value = _optional(data, key)
    return None if value is None else _integer(value, f"{path}.{key}")


class AnswerState(str, Enum):
    UNSET = "unset"
    EXPLICITLY_NONE = "none"
    VALUED = "valued"


@dataclass(frozen=True, slots=True)
class Answer:
    """A collected amount that distinguishes "never asked" from "answered none"."""

    state: AnswerState = AnswerState.UNSET
    amount: float = 0.0

    @classmethod
    def unset(cls) -> "Answer":
        return cls()

    @classmethod
    def none(cls) -> "Answer":
        return cls(state=AnswerState.EXPLICITLY_NONE)

    @classmethod
    def valued(cls, amount: float) -> "Answer":
        return cls(state=AnswerState.VALUED, amount=float(amount))

    @classmethod
    def parse(cls, data: dict[str, Any], key: str, path: str) -> "Answer":
        if key not in data:
            return cls.unset()
        value = data[key]
        if value is None:
            return cls.none()
        return cls.valued(_number(value, f"{path}.{key}"))

    @property
    def is_answered(self) -> bool:
        return self.state is not AnswerState.UNSET

    @property
    def is_valued(self) -> bool:
        return self.state is AnswerState.VALUED

    def or_zero(self) -> float:
        return self.amount if self.is_valued else 0.0


@dataclass(frozen=True, slots=True)
class AccountInputs:
    balance: Answer = Answer()
    annual_contribution: float = 0.0
    cost_basis: Answer = Answer()

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "AccountInputs":
        contribution = _optional(data, "annual_contribution", 0.0)
        return cls(
            balance=Answer.parse(data, "balance", path),
            annual_contribution=_number(contribution, f"{path}.annual_contribution"),
            cost_basis=Answer.parse(data, "cost_basis", path),
        )


@dataclass(frozen=True, slots=True)
class Assets:
    rrsp: AccountInputs = AccountInputs()
    tfsa: AccountInputs = AccountInputs()
    non_registered: AccountInputs = AccountInputs()

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "assets") -> "Assets":
        accounts: dict[str, AccountInputs] = {}
        for key in ("rrsp", "tfsa", "non_registered"):
            raw = _optional(data, key)
            accounts[key] = AccountInputs() if raw is None else AccountInputs.from_dict(_expect_dict(raw, f"{path}.{key}"), f"{path}.{key}")
        return cls(**accounts)


@dataclass(frozen=True, slots=True)
class CPPInputs:
    start_age: int
    monthly_amount_at_65: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "CPPInputs":
        return cls(
            start_age=_integer(_require(data, "start_age", path), f"{path}.start_age"),
            monthly_amount_at_65=_number(_require(data, "monthly_amount_at_65", path), f"{path}.monthly_amount_at_65"),
        )


@dataclass(frozen=True, slots=True)
class OASInputs:
    start_age: int
    monthly_amount: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "OASInputs":
        return cls(
            start_age=_integer(_require(data, "start_age", path), f"{path}.start_age"),
            monthly_amount=_number(_require(data, "monthly_amount", path), f"{path}.monthly_amount"),
        )


@dataclass(frozen=True, slots=True)
class IncomeStream:
    description: str
    annual_amount: float
    start_age: int | None = None
    end_age: int | None = None
    indexed_to_inflation: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "IncomeStream":
        return cls(
            description=str(_optional(data, "description", "")),
            annual_amount=_number(_require(data, "annual_amount", path), f"{path}.annual_amount"),
            start_age=_optional_integer(data, "start_age", path),
            end_age=_optional_integer(data, "end_age", path),
            indexed_to_inflation=bool(_optional(data, "indexed_to_inflation", True)),
        )


def _streams(data: dict[str, Any], key: str, path: str) -> tuple[IncomeStream, ...]:
    raw = _expect_list(_optional(data, key, []), f"{path}.{key}")
    return tuple(
        IncomeStream.from_dict(_expect_dict(item, f"{path}.{key}[{idx}]"), f"{path}.{key}[{idx}]")
        for idx, item in enumerate(raw)
    )


@dataclass(frozen=True, slots=True)
class IncomeSources:
    cpp: CPPInputs | None = None
    oas: OASInputs | None = None
    pensions: tuple[IncomeStream, ...] = ()
    other_income: tuple[IncomeStream, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "income_sources") -> "IncomeSources":
        cpp_raw = _optional(data, "cpp")
        oas_raw = _optional(data, "oas")
        return cls(
            cpp=None if cpp_raw is None else CPPInputs.from_dict(_expect_dict(cpp_raw, f"{path}.cpp"), f"{path}.cpp"),
            oas=None if oas_raw is None else OASInputs.from_dict(_expect_dict(oas_raw, f"{path}.oas"), f"{path}.oas"),
            pensions=_streams(data, "pensions", path),
            other_income=_streams(data, "other_income", path),
        )


@dataclass(frozen=True, slots=True)
class SpendingChange:
    age: int
    monthly_amount: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "SpendingChange":
        return cls(
            age=_integer(_require(data, "age", path), f"{path}.age"),
            monthly_amount=_number(_require(data, "monthly_amount", path), f"{path}.monthly_amount"),
        )


@dataclass(frozen=True, slots=True)
class ExpensePlan:
    fixed_monthly: float
    variable_annual: float = 0.0
    indexed_to_inflation: bool = True
    age_based_changes: tuple[SpendingChange, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "expenses") -> "ExpensePlan":
        changes_raw = _expect_list(_optional(data, "age_based_changes", []), f"{path}.age_based_changes")
        changes = tuple(
            SpendingChange.from_dict(_expect_dict(item, f"{path}.age_based_changes[{idx}]"), f"{path}.age_based_changes[{idx}]")
            for idx, item in enumerate(changes_raw)
        )
        return cls(
            fixed_monthly=_number(_require(data, "fixed_monthly", path), f"{path}.fixed_monthly"),
            variable_annual=_number(_optional(data, "variable_annual", 0.0), f"{path}.variable_annual"),
            indexed_to_inflation=bool(_optional(data, "indexed_to_inflation", True)),
            age_based_changes=changes,
        )


@dataclass(frozen=True, slots=True)
class Assumptions:
    pre_retirement_return: float
    post_retirement_return: float
    inflation_rate: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "assumptions") -> "Assumptions":
        return cls(
            pre_retirement_return=_number(_require(data, "pre_retirement_return", path), f"{path}.pre_retirement_return"),
            post_retirement_return=_number(_require(data, "post_retirement_return", path), f"{path}.post_retirement_return"),
            inflation_rate=_number(_require(data, "inflation_rate", path), f"{path}.inflation_rate"),
        )


@dataclass(frozen=True, slots=True)
class ScenarioInputs:
    name: str
    current_age: int
    retirement_age: int
    longevity_age: int
    province: str
    assets: Assets
    income_sources: IncomeSources
    expenses: ExpensePlan
    assumptions: Assumptions
    start_year: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScenarioInputs":
        basic = _expect_dict(_require(data, "basic_inputs", "scenario"), "basic_inputs")
        return cls(
            name=str(_optional(data, "name", "Scenario")),
            current_age=_integer(_require(basic, "current_age", "basic_inputs"), "basic_inputs.current_age"),
            retirement_age=_integer(_require(basic, "retirement_age", "basic_inputs"), "basic_inputs.retirement_age"),
            longevity_age=_integer(_require(basic, "longevity_age", "basic_inputs"), "basic_inputs.longevity_age"),
            province=str(_require(basic, "province", "basic_inputs")),
            start_year=_optional_integer(basic, "start_year", "basic_inputs"),
            assets=Assets.from_dict(_expect_dict(_optional(data, "assets", {}), "assets")),
            income_sources=IncomeSources.from_dict(_expect_dict(_optional(data, "income_sources", {}), "income_sources")),
            expenses=ExpensePlan.from_dict(_expect_dict(_require(data, "expenses", "scenario"), "expenses")),
            assumptions=Assumptions.from_dict(_expect_dict(_require(data, "assumptions", "scenario"), "assumptions")),
        )


def load_scenario(path: str | Path) -> ScenarioInputs:
    """Load scenario JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("scenario: root must be a JSON object")
    return ScenarioInputs.from_dict(raw)
