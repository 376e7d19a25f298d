"""Cost basis tracking for non-registered accounts using the average cost method."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Gain share assumed for withdrawals when no cost base was provided.
UNTRACKED_GAIN_FRACTION: Final[float] = 0.5


@dataclass(slots=True)
class CostBasisTracker:
    total_basis: float = 0.0

    def add_basis(self, amount: float) -> None:
        if amount <= 0:
            return
        self.total_basis += amount

    def gain_fraction(self, balance: float) -> float:
        if balance <= 0:
            return 0.0
        return max(0.0, (balance - self.total_basis) / balance)

    def reduce_basis(self, amount: float, balance_before: float) -> float:
        """Remove the withdrawn share of basis and return the amount removed."""
        if amount <= 0 or balance_before <= 0:
            return 0.0

        share = min(1.0, amount / balance_before)
        basis_reduction = self.total_basis * share
        self.total_basis = max(0.0, self.total_basis - basis_reduction)
        return basis_reduction


def realized_gain(amount: float, balance: float, tracker: CostBasisTracker | None) -> float:
    if amount <= 0:
        return 0.0
    if tracker is None:
        return amount * UNTRACKED_GAIN_FRACTION
    return amount * tracker.gain_fraction(balance)
