"""Tests for envelope rollover accounting."""

import pytest
from decimal import Decimal

from sheetledger.budget_plan.rollover import compute_rollover_balances, rollover_balances_for


def _d(values):
    return [Decimal(str(value)) for value in values]


class TestComputeRolloverBalances:
    """Tests for compute_rollover_balances."""

    def test_documented_example(self):
        balances = compute_rollover_balances(_d([150, 250, 100, 200, 200, 200]), Decimal("200"))

        assert balances == _d([0, 50, 0, 100, 100, 100])

    def test_first_month_is_always_zero(self):
        assert compute_rollover_balances(_d([0]), Decimal("500")) == _d([0])

    def test_empty_row(self):
        assert compute_rollover_balances([], Decimal("100")) == []

    def test_underspend_accumulates(self):
        balances = compute_rollover_balances(_d([50, 50, 50, 50]), Decimal("100"))

        assert balances == _d([0, 50, 100, 150])

    @pytest.mark.parametrize("amounts", [
        [10000, 0, 0],
        [0, 1000000, 50, 999999],
        [-50, 5000, 100, 100],
    ])
    def test_never_negative(self, amounts):
        balances = compute_rollover_balances(_d(amounts), Decimal("100"))

        assert all(balance >= 0 for balance in balances)

    def test_overspend_resets_toward_zero_not_below(self):
        balances = compute_rollover_balances(_d([50, 500, 50]), Decimal("100"))

        # 50 carried into February, a 400 overspend clears it for March
        assert balances == _d([0, 50, 0])


class TestRolloverBalancesFor:
    """Tests for the rollover flag gate."""

    def test_disabled_rollover_is_all_zero(self):
        balances = rollover_balances_for(False, Decimal("200"), _d([0, 0, 0]))

        assert balances == _d([0, 0, 0])

    def test_enabled_rollover_uses_monthly_budget(self):
        balances = rollover_balances_for(True, Decimal("200"), _d([100, 100]))

        assert balances == _d([0, 100])
