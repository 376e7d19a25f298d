"""Withdrawal sequencing across RRSP/RRIF, TFSA and non-registered accounts."""

from __future__ import annotations

from dataclasses import dataclass

from .accounts import AccountBalances
from .cost_basis import CostBasisTracker, realized_gain
from .provider import MinimumWithdrawalSchedule
from .rrif import minimum_withdrawal


@dataclass(frozen=True, slots=True)
class WithdrawalPlan:
    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    non_registered: float = 0.0
    total: float = 0.0
    capital_gains: float = 0.0
    rrif_minimum: float = 0.0

    @classmethod
    def empty(cls) -> "WithdrawalPlan":
        return cls()


def sequence_withdrawals(
    target: float,
    balances: AccountBalances,
    age: int,
    *,
    schedule: MinimumWithdrawalSchedule,
    cost_basis: CostBasisTracker | None = None,
) -> WithdrawalPlan:
    """Allocate a year's withdrawal need across accounts.

    The RRIF minimum comes out of the RRSP/RRIF first and counts toward the
    need. Whatever remains is drawn from non-registered, then additional
    RRSP/RRIF, then TFSA. Each draw is capped at the account balance, so a
    short portfolio yields a partial plan rather than an error.
    """
    rrif_minimum = minimum_withdrawal(balances.rrsp_rrif, age, schedule)
    required = max(0.0, target, rrif_minimum)

    from_rrsp = min(rrif_minimum, balances.rrsp_rrif)
    remaining = required - from_rrsp

    from_non_registered = 0.0
    from_tfsa = 0.0
    if remaining > 0:
        from_non_registered = min(remaining, balances.non_registered)
        remaining -= from_non_registered

        extra_rrsp = min(remaining, balances.rrsp_rrif - from_rrsp)
        from_rrsp += extra_rrsp
        remaining -= extra_rrsp

        from_tfsa = min(remaining, balances.tfsa)

    return WithdrawalPlan(
        rrsp_rrif=from_rrsp,
        tfsa=from_tfsa,
        non_registered=from_non_registered,
        total=from_rrsp + from_tfsa + from_non_registered,
        capital_gains=realized_gain(from_non_registered, balances.non_registered, cost_basis),
        rrif_minimum=rrif_minimum,
    )
