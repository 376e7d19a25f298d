import pytest

from canretire.accounts import AccountBalances, project_growth


@pytest.mark.parametrize(
    ("start", "contribution", "withdrawal", "rate", "expected_ending", "expected_return"),
    [
        (100_000, 10_000, 0, 0.06, 116_600.0, 6_600.0),
        (100_000, 0, 20_000, 0.06, 84_800.0, 4_800.0),
        (100_000, 15_000, 10_000, 0.05, 110_250.0, 5_250.0),
        (100_000, 0, 0, -0.10, 90_000.0, -10_000.0),
        (0, 0, 0, 0.06, 0.0, 0.0),
    ],
)
def test_project_growth(start, contribution, withdrawal, rate, expected_ending, expected_return):
    result = project_growth(start, contribution, withdrawal, rate)
    assert round(result.ending_balance, 2) == expected_ending
    assert round(result.investment_return, 2) == expected_return


def test_over_withdrawal_floors_at_zero():
    result = project_growth(10_000, 0, 25_000, 0.05)
    assert result.ending_balance == 0.0
    assert result.investment_return == 0.0


def test_rate_below_minus_one_never_goes_negative():
    result = project_growth(50_000, 0, 0, -1.5)
    assert result.ending_balance == 0.0
    assert result.investment_return == -50_000.0


def test_balances_total_is_sum_of_buckets():
    balances = AccountBalances(rrsp_rrif=500_000, tfsa=100_000, non_registered=200_000)
    assert balances.total == 800_000
    assert AccountBalances.zero().total == 0.0


def test_negative_bucket_rejected():
    with pytest.raises(ValueError, match="tfsa"):
        AccountBalances(rrsp_rrif=1.0, tfsa=-0.5, non_registered=0.0)
