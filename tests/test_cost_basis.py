from canretire.cost_basis import UNTRACKED_GAIN_FRACTION, CostBasisTracker, realized_gain


def test_reduce_basis_is_proportional_to_withdrawal():
    tracker = CostBasisTracker(total_basis=60_000)
    gain = realized_gain(25_000, 100_000, tracker)
    removed = tracker.reduce_basis(25_000, 100_000)

    assert round(gain, 2) == 10_000.0
    assert round(removed, 2) == 15_000.0
    assert round(tracker.total_basis, 2) == 45_000.0


def test_add_basis_ignores_non_positive_amounts():
    tracker = CostBasisTracker(total_basis=1_000)
    tracker.add_basis(500)
    tracker.add_basis(0)
    tracker.add_basis(-200)
    assert tracker.total_basis == 1_500


def test_full_liquidation_clears_basis():
    tracker = CostBasisTracker(total_basis=30_000)
    assert round(realized_gain(50_000, 50_000, tracker), 2) == 20_000.0
    assert tracker.reduce_basis(50_000, 50_000) == 30_000
    assert tracker.total_basis == 0.0


def test_reduce_basis_on_empty_account_is_a_no_op():
    tracker = CostBasisTracker(total_basis=5_000)
    assert tracker.reduce_basis(1_000, 0.0) == 0.0
    assert tracker.total_basis == 5_000


def test_realized_gain_without_tracker_uses_default_fraction():
    assert realized_gain(10_000, 40_000, None) == 10_000 * UNTRACKED_GAIN_FRACTION
    assert realized_gain(0, 40_000, None) == 0.0
