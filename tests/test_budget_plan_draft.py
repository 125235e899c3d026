"""Tests for budget plan drafts and change tracking."""

import pytest
from decimal import Decimal

from sheetledger.budget_plan.draft import (
    apply_money_change,
    create_budget_plan_draft,
    flatten_budget_plan_grid,
    is_budget_plan_draft_dirty,
    list_budget_plan_changes,
    reset_budget_plan_draft,
    serialize_budget_plan_draft,
)
from sheetledger.budget_plan.grid import build_budget_plan_grid
from sheetledger.validation import ValidationError


@pytest.fixture
def grid(categories, budget_plan_records, start_date):
    return build_budget_plan_grid(categories, budget_plan_records, start_date=start_date)


@pytest.fixture
def draft(grid):
    return create_budget_plan_draft(grid)


def _row(container, category_id):
    return next(row for row in container.rows if row.category.category_id == category_id)


# =============================================================================
# Creation
# =============================================================================

class TestCreateDraft:
    """Tests for create_budget_plan_draft."""

    def test_new_draft_is_clean(self, draft):
        assert is_budget_plan_draft_dirty(draft) is False
        assert list_budget_plan_changes(draft) == []

    def test_draft_shares_no_objects_with_grid(self, grid, draft):
        assert draft.rows[0] is not grid.rows[0]
        assert draft.rows[0].cells[0] is not grid.rows[0].cells[0]
        assert draft.rows[0].category is not grid.rows[0].category
        assert draft.months[0] is not grid.months[0]

    def test_mutating_draft_leaves_grid_untouched(self, grid, draft):
        draft.rows[0].cells[0].amount = Decimal("999")

        assert grid.rows[0].cells[0].amount == Decimal("150")

    def test_unedited_draft_serializes_like_grid(self, grid, draft):
        assert serialize_budget_plan_draft(draft) == flatten_budget_plan_grid(grid)


# =============================================================================
# Editing
# =============================================================================

class TestApplyMoneyChange:
    """Tests for apply_money_change."""

    def test_updates_amount_and_marks_dirty(self, draft):
        updated = apply_money_change(draft, "dining", 3, Decimal("450"))

        assert _row(updated, "dining").cells[3].amount == Decimal("450")
        assert is_budget_plan_draft_dirty(updated) is True

    def test_input_draft_is_not_modified(self, draft):
        apply_money_change(draft, "dining", 3, Decimal("450"))

        assert _row(draft, "dining").cells[3].amount == Decimal("300")
        assert is_budget_plan_draft_dirty(draft) is False

    def test_currency_is_upper_cased(self, draft):
        updated = apply_money_change(draft, "travel", 0, Decimal("100"), currency="gbp")

        assert _row(updated, "travel").cells[0].currency == "GBP"
        assert is_budget_plan_draft_dirty(updated) is True

    def test_recomputes_rollover_for_later_months(self, draft):
        updated = apply_money_change(draft, "travel", 1, Decimal("40"))

        balances = [cell.rollover_balance for cell in _row(updated, "travel").cells]
        assert balances[:4] == [Decimal("0"), Decimal("0"), Decimal("60"), Decimal("60")]

    def test_recomputes_the_whole_row(self, draft):
        # Editing the last month must leave earlier balances consistent
        updated = apply_money_change(draft, "groceries", 11, Decimal("0"))

        balances = [cell.rollover_balance for cell in _row(updated, "groceries").cells]
        assert balances[1] == Decimal("50")
        assert balances[11] == Decimal("0")

    def test_rollover_never_negative_after_overspend(self, draft):
        updated = apply_money_change(draft, "travel", 0, Decimal("1000000"))

        assert all(cell.rollover_balance >= 0 for cell in _row(updated, "travel").cells)

    def test_non_rollover_row_stays_zero(self, draft):
        updated = apply_money_change(draft, "dining", 0, Decimal("0"))

        assert all(cell.rollover_balance == 0 for cell in _row(updated, "dining").cells)

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), Decimal("-Infinity")])
    def test_non_finite_amount_raises(self, draft, amount):
        with pytest.raises(ValidationError, match="expected finite number"):
            apply_money_change(draft, "dining", 0, amount)

    def test_unknown_category_raises(self, draft):
        with pytest.raises(ValidationError, match="Category rent not found"):
            apply_money_change(draft, "rent", 0, Decimal("1"))

    @pytest.mark.parametrize("month_index", [-1, 12])
    def test_month_index_out_of_range_raises(self, draft, month_index):
        with pytest.raises(ValidationError, match="out of range"):
            apply_money_change(draft, "dining", month_index, Decimal("1"))


# =============================================================================
# Dirty tracking
# =============================================================================

class TestDirtyTracking:
    """Tests for is_budget_plan_draft_dirty and list_budget_plan_changes."""

    def test_revert_amount_makes_draft_clean(self, draft):
        edited = apply_money_change(draft, "groceries", 0, Decimal("175"))
        reverted = apply_money_change(edited, "groceries", 0, Decimal("150"))

        assert is_budget_plan_draft_dirty(edited) is True
        assert is_budget_plan_draft_dirty(reverted) is False

    def test_revert_currency_makes_draft_clean(self, draft):
        edited = apply_money_change(draft, "travel", 2, Decimal("100"), currency="GBP")
        reverted = apply_money_change(edited, "travel", 2, Decimal("100"), currency="eur")

        assert is_budget_plan_draft_dirty(reverted) is False

    def test_lists_changes(self, draft):
        edited = apply_money_change(draft, "dining", 4, Decimal("320"))

        changes = list_budget_plan_changes(edited)

        assert len(changes) == 1
        change = changes[0]
        assert change.category_id == "dining"
        assert change.month_index == 4
        assert change.record_id == "budget_dining_2025-05"
        assert change.previous_amount == Decimal("300")
        assert change.amount == Decimal("320")

    def test_reset_discards_edits(self, draft):
        edited = apply_money_change(draft, "dining", 4, Decimal("320"))

        reset = reset_budget_plan_draft(edited)

        assert is_budget_plan_draft_dirty(reset) is False
        assert _row(reset, "dining").cells[4].amount == Decimal("300")


# =============================================================================
# Serialization
# =============================================================================

class TestSerialize:
    """Tests for serialize_budget_plan_draft."""

    def test_one_record_per_cell(self, draft):
        records = serialize_budget_plan_draft(draft)

        assert len(records) == 12 * 3

    def test_record_fields(self, draft):
        edited = apply_money_change(draft, "groceries", 0, Decimal("120"))

        records = serialize_budget_plan_draft(edited)
        first, second = records[0], records[1]

        assert first.record_id == "rec-jan"
        assert first.category_id == "groceries"
        assert (first.year, first.month) == (2025, 1)
        assert first.amount == Decimal("120")
        assert first.currency == "USD"
        assert first.rollover_balance == Decimal("0")
        assert second.rollover_balance == Decimal("80")

    def test_generated_ids_are_preserved(self, draft):
        records = serialize_budget_plan_draft(draft)

        assert records[2].record_id == "budget_groceries_2025-03"
