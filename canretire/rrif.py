"""RRIF minimum withdrawal helpers."""

from __future__ import annotations

from .provider import MinimumWithdrawalSchedule


def minimum_percentage(age: int, schedule: MinimumWithdrawalSchedule) -> float:
    if age < schedule.first_age:
        return 0.0
    if age >= schedule.terminal_age:
        return schedule.terminal_percentage
    return schedule.percentages[age]


def mandatory_regime_active(age: int, schedule: MinimumWithdrawalSchedule) -> bool:
    return age >= schedule.conversion_age


def minimum_withdrawal(balance: float, age: int, schedule: MinimumWithdrawalSchedule) -> float:
    """Return the mandatory RRIF withdrawal for a start-of-year balance, or 0 before conversion."""
    if balance <= 0 or not mandatory_regime_active(age, schedule):
        return 0.0
    return balance * minimum_percentage(age, schedule)
