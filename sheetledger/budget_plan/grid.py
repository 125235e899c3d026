"""
Budget plan grid builder.

Materializes a rolling category x month matrix from category defaults and
stored budget plan records. Months without a stored record are filled from
the category's monthly budget and given a deterministic record id, so
building the grid twice from the same inputs yields the same ids.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from sheetledger.budget_plan.rollover import rollover_balances_for
from sheetledger.budget_plan.schemas import BudgetPlanRecord, CategoryRecord
from sheetledger.months import format_month_id, month_key_from_date, month_key_to_parts
from sheetledger.validation import ValidationError, ensure_integer, to_decimal

DEFAULT_HORIZON_MONTHS = 12
DEFAULT_CURRENCY = "USD"


@dataclass
class BudgetPlanMonth:
    """A column of the grid."""
    id: str  # "YYYY-MM"
    month: int
    year: int
    index: int
    month_key: int


@dataclass
class BudgetPlanCategory:
    """Category fields the grid needs."""
    category_id: str
    label: str
    color: str
    rollover_flag: bool
    monthly_budget: Decimal
    currency_code: str
    sort_order: int


@dataclass
class BudgetPlanCell:
    """Planned amount for one category in one month."""
    record_id: str
    category_id: str
    month: int
    year: int
    month_index: int
    amount: Decimal
    currency: str
    rollover_balance: Decimal
    is_generated: bool


@dataclass
class BudgetPlanRow:
    category: BudgetPlanCategory
    cells: List[BudgetPlanCell] = field(default_factory=list)


@dataclass
class BudgetPlanGrid:
    months: List[BudgetPlanMonth] = field(default_factory=list)
    rows: List[BudgetPlanRow] = field(default_factory=list)


def generate_budget_plan_record_id(category_id: str, year: int, month: int) -> str:
    """Deterministic id for a synthesized budget plan record."""
    return f"budget_{category_id}_{format_month_id(year, month)}"


def normalize_monthly_budget(value) -> Decimal:
    """Non-finite or missing budgets count as zero."""
    if value is None:
        return Decimal("0")
    number = to_decimal(value)
    return number if number.is_finite() else Decimal("0")


def normalize_start_date(start_date: Optional[date]) -> date:
    """First day of start_date's month (today when omitted)."""
    reference = start_date or date.today()
    return reference + relativedelta(day=1)


def build_months(start_date: date, horizon: int = DEFAULT_HORIZON_MONTHS) -> List[BudgetPlanMonth]:
    start_key = month_key_from_date(start_date)
    months = []

    for index in range(horizon):
        year, month = month_key_to_parts(start_key + index)
        months.append(BudgetPlanMonth(
            id=format_month_id(year, month),
            month=month,
            year=year,
            index=index,
            month_key=start_key + index,
        ))

    return months


def _summarize_category(category: CategoryRecord, default_currency: str) -> BudgetPlanCategory:
    return BudgetPlanCategory(
        category_id=category.category_id,
        label=category.label,
        color=category.color,
        rollover_flag=bool(category.rollover_flag),
        monthly_budget=normalize_monthly_budget(category.monthly_budget),
        currency_code=(category.currency_code or default_currency).upper(),
        sort_order=category.sort_order,
    )


def build_row(category: BudgetPlanCategory, cells: List[BudgetPlanCell]) -> BudgetPlanRow:
    """Attach rollover balances to a row's cells."""
    balances = rollover_balances_for(
        category.rollover_flag,
        category.monthly_budget,
        [cell.amount for cell in cells],
    )
    for cell, balance in zip(cells, balances):
        cell.rollover_balance = balance
    return BudgetPlanRow(category=category, cells=cells)


def build_budget_plan_grid(
    categories: List[CategoryRecord],
    budget_plan: List[BudgetPlanRecord],
    start_date: Optional[date] = None,
    horizon: int = DEFAULT_HORIZON_MONTHS,
    default_currency: str = DEFAULT_CURRENCY,
) -> BudgetPlanGrid:
    """
    Build the rolling budget plan grid.

    Args:
        categories: Categories to show, one row each
        budget_plan: Stored budget plan records (any months)
        start_date: Any date in the first month of the grid
        horizon: Number of months to show
        default_currency: Currency for categories without one

    Returns:
        BudgetPlanGrid with rows sorted by sort_order
    """
    horizon = ensure_integer(horizon, "budget plan horizon")
    if horizon < 1:
        raise ValidationError("Invalid budget plan horizon: must be at least 1", "budget plan horizon")

    months = build_months(normalize_start_date(start_date), horizon)

    # Literal (year, month): month 13 of 2025 is not January 2026
    record_lookup: Dict[Tuple[str, int, int], BudgetPlanRecord] = {}
    for record in budget_plan:
        record_lookup[(record.category_id, record.year, record.month)] = record

    # sorted() is stable, so categories sharing a sort_order keep their input order
    sorted_categories = sorted(categories, key=lambda category: category.sort_order)
    rows = []

    for category_record in sorted_categories:
        category = _summarize_category(category_record, default_currency)
        cells = []

        for month in months:
            record = record_lookup.get((category.category_id, month.year, month.month))

            if record is not None:
                cells.append(BudgetPlanCell(
                    record_id=record.record_id,
                    category_id=category.category_id,
                    month=month.month,
                    year=month.year,
                    month_index=month.index,
                    amount=record.amount,
                    currency=(record.currency or category.currency_code).upper(),
                    rollover_balance=Decimal("0"),
                    is_generated=False,
                ))
            else:
                cells.append(BudgetPlanCell(
                    record_id=generate_budget_plan_record_id(
                        category.category_id, month.year, month.month
                    ),
                    category_id=category.category_id,
                    month=month.month,
                    year=month.year,
                    month_index=month.index,
                    amount=category.monthly_budget,
                    currency=category.currency_code,
                    rollover_balance=Decimal("0"),
                    is_generated=True,
                ))

        rows.append(build_row(category, cells))

    return BudgetPlanGrid(months=months, rows=rows)
