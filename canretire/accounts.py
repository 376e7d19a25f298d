"""Account balance buckets and single-account growth projection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountBalances:
    rrsp_rrif: float = 0.0
    tfsa: float = 0.0
    non_registered: float = 0.0

    def __post_init__(self) -> None:
        for name in ("rrsp_rrif", "tfsa", "non_registered"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name}: balance cannot be negative")

    @property
    def total(self) -> float:
        return self.rrsp_rrif + self.tfsa + self.non_registered

    @classmethod
    def zero(cls) -> "AccountBalances":
        return cls()


@dataclass(frozen=True, slots=True)
class GrowthResult:
    ending_balance: float
    investment_return: float


def project_growth(starting_balance: float, contribution: float, withdrawal: float, rate: float) -> GrowthResult:
    """Grow one account for a year after applying its contribution and withdrawal.

    The return is earned on the post-flow balance. A rate below -100% cannot
    push the account negative.
    """
    net_balance = max(0.0, starting_balance + contribution - withdrawal)
    investment_return = net_balance * rate
    ending = net_balance + investment_return
    if ending < 0:
        return GrowthResult(ending_balance=0.0, investment_return=-net_balance)
    return GrowthResult(ending_balance=ending, investment_return=investment_return)
