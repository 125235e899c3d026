"""
Budget plan drafts - editable copies of a budget plan grid.

A draft keeps the grid it was created from as an untouched baseline next
to its own mutable rows. Dirty detection compares against that baseline,
so reverting an edit makes the draft clean again. Edits return a new draft
and leave the input draft as it was.
"""
from copy import deepcopy
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sheetledger.budget_plan.grid import (
    BudgetPlanCell,
    BudgetPlanGrid,
    BudgetPlanMonth,
    BudgetPlanRow,
    build_row,
)
from sheetledger.budget_plan.schemas import BudgetPlanRecord
from sheetledger.validation import ValidationError, ensure_finite_number


@dataclass
class BudgetPlanDraft:
    months: List[BudgetPlanMonth]
    rows: List[BudgetPlanRow]
    baseline: BudgetPlanGrid


@dataclass
class BudgetPlanChange:
    """A cell whose amount or currency differs from the baseline."""
    category_id: str
    month_index: int
    record_id: str
    previous_amount: Decimal
    amount: Decimal
    previous_currency: str
    currency: str


def create_budget_plan_draft(grid: BudgetPlanGrid) -> BudgetPlanDraft:
    """Clone grid into a draft; the draft shares no objects with grid."""
    baseline = deepcopy(grid)
    return BudgetPlanDraft(
        months=deepcopy(baseline.months),
        rows=deepcopy(baseline.rows),
        baseline=baseline,
    )


def reset_budget_plan_draft(draft: BudgetPlanDraft) -> BudgetPlanDraft:
    """Discard all edits."""
    return create_budget_plan_draft(draft.baseline)


def apply_money_change(
    draft: BudgetPlanDraft,
    category_id: str,
    month_index: int,
    amount: Decimal,
    currency: Optional[str] = None,
) -> BudgetPlanDraft:
    """
    Set one cell's amount (and optionally currency) and recompute its row.

    The whole row's rollover chain is recomputed, since changing month k
    changes the rollover of every later month.

    Returns:
        A new BudgetPlanDraft; the input draft is not modified

    Raises:
        ValidationError: Non-finite amount, unknown category or month index
    """
    amount = ensure_finite_number(amount, "amount")

    row_index = next(
        (index for index, row in enumerate(draft.rows) if row.category.category_id == category_id),
        None,
    )
    if row_index is None:
        raise ValidationError(f"Category {category_id} not found in draft", "category_id")

    target_row = draft.rows[row_index]
    if not isinstance(month_index, int) or month_index < 0 or month_index >= len(target_row.cells):
        raise ValidationError(f"Month index {month_index} is out of range", "month_index")

    cells: List[BudgetPlanCell] = deepcopy(target_row.cells)
    cell = cells[month_index]
    cell.amount = amount
    if currency:
        cell.currency = currency.strip().upper()

    rows = [deepcopy(row) for row in draft.rows]
    rows[row_index] = build_row(deepcopy(target_row.category), cells)

    return BudgetPlanDraft(
        months=deepcopy(draft.months),
        rows=rows,
        baseline=draft.baseline,
    )


def list_budget_plan_changes(draft: BudgetPlanDraft) -> List[BudgetPlanChange]:
    """Cells that differ from the baseline, in row then month order."""
    baseline_cells = {
        (row.category.category_id, cell.month_index): cell
        for row in draft.baseline.rows
        for cell in row.cells
    }
    changes = []

    for row in draft.rows:
        for cell in row.cells:
            original = baseline_cells.get((row.category.category_id, cell.month_index))
            if original is None:
                continue
            if cell.amount != original.amount or cell.currency != original.currency:
                changes.append(BudgetPlanChange(
                    category_id=row.category.category_id,
                    month_index=cell.month_index,
                    record_id=cell.record_id,
                    previous_amount=original.amount,
                    amount=cell.amount,
                    previous_currency=original.currency,
                    currency=cell.currency,
                ))

    return changes


def is_budget_plan_draft_dirty(draft: BudgetPlanDraft) -> bool:
    return len(list_budget_plan_changes(draft)) > 0


def _records_for_rows(rows: List[BudgetPlanRow]) -> List[BudgetPlanRecord]:
    return [
        BudgetPlanRecord(
            record_id=cell.record_id,
            category_id=cell.category_id,
            month=cell.month,
            year=cell.year,
            amount=cell.amount,
            currency=cell.currency,
            rollover_balance=cell.rollover_balance,
        )
        for row in rows
        for cell in row.cells
    ]


def flatten_budget_plan_grid(grid: BudgetPlanGrid) -> List[BudgetPlanRecord]:
    return _records_for_rows(grid.rows)


def serialize_budget_plan_draft(draft: BudgetPlanDraft) -> List[BudgetPlanRecord]:
    """Flatten every cell into the record shape persisted to the store."""
    return _records_for_rows(draft.rows)
