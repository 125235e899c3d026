"""
Runway Projection Engine - monthly cash runway from ledger inputs.

Turns account balance snapshots, monthly budget allocations and planned or
posted cash flows into one projection row per month, starting at the month
of the most recent snapshot. Each row starts at the previous row's
projected ending balance, so the rows form a forecast chain.

This is a pure module - no I/O. Any malformed input aborts the whole
projection; skipping a record would corrupt every later month.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from sheetledger.months import create_month_key, month_key_to_parts, parse_date_to_month_parts
from sheetledger.validation import (
    ValidationError,
    ensure_finite_number,
    ensure_integer,
    normalize_zero,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class CashFlowType(str, Enum):
    """Direction of a cash flow."""
    INCOME = "income"
    EXPENSE = "expense"


class CashFlowStatus(str, Enum):
    """Lifecycle status of a cash flow."""
    PLANNED = "planned"
    POSTED = "posted"
    VOID = "void"


class StoplightStatus(str, Enum):
    """Risk band of a projected ending balance."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass
class AccountSnapshotBalance:
    """Balance of one account at a point in time."""
    account_id: str
    date: str
    balance: Decimal


@dataclass
class MonthlyBudgetAllocation:
    """Budgeted spend for a month, already summed across categories."""
    month: int
    year: int
    amount: Decimal


@dataclass
class CashFlowEntry:
    """
    A single income or expense entry.

    Posted entries use the actual date/amount when present and fall back to
    the planned values; planned entries always use the planned values.
    """
    type: str  # "income" | "expense"
    status: str  # "planned" | "posted" | "void"
    planned_date: str
    planned_amount: Decimal
    flow_id: Optional[str] = None
    actual_date: Optional[str] = None
    actual_amount: Optional[Decimal] = None


@dataclass
class RunwayProjectionRow:
    """Projection figures for a single month."""
    month: int
    year: int
    starting_balance: Decimal
    actual_income_total: Decimal
    projected_income_total: Decimal
    actual_expense_total: Decimal
    projected_expense_total: Decimal
    actual_ending_balance: Decimal
    projected_ending_balance: Decimal
    stoplight_status: StoplightStatus
    notes: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["stoplight_status"] = self.stoplight_status.value
        return data


@dataclass
class RunwaySummary:
    """Headline figures for a projection."""
    months: int = 0
    lowest_balance: Optional[Decimal] = None
    lowest_balance_month: Optional[str] = None
    first_red_month: Optional[str] = None
    months_by_status: Dict[str, int] = field(default_factory=dict)


@dataclass
class _LatestSnapshot:
    month_key: int
    timestamp: datetime
    balance: Decimal


def resolve_stoplight(
    balance: Decimal,
    warning_threshold: Decimal,
    danger_threshold: Decimal,
) -> StoplightStatus:
    """Classify a balance; both thresholds are exclusive upper bounds of their band."""
    if balance < danger_threshold:
        return StoplightStatus.RED
    if balance < warning_threshold:
        return StoplightStatus.YELLOW
    return StoplightStatus.GREEN


def _latest_snapshots(snapshots: List[AccountSnapshotBalance]) -> Dict[str, _LatestSnapshot]:
    latest: Dict[str, _LatestSnapshot] = {}

    for snapshot in snapshots:
        parsed = parse_date_to_month_parts(
            snapshot.date,
            f"snapshot date for account {snapshot.account_id}",
        )
        balance = ensure_finite_number(
            snapshot.balance,
            f"snapshot balance for account {snapshot.account_id}",
        )

        existing = latest.get(snapshot.account_id)
        if existing is None or parsed.timestamp > existing.timestamp:
            latest[snapshot.account_id] = _LatestSnapshot(
                month_key=parsed.month_key,
                timestamp=parsed.timestamp,
                balance=balance,
            )

    return latest


def build_runway_projection(
    budgets: List[MonthlyBudgetAllocation],
    cash_flows: List[CashFlowEntry],
    snapshots: List[AccountSnapshotBalance],
    warning_balance_threshold: Decimal,
    danger_balance_threshold: Decimal,
    months_to_project: Optional[int] = None,
) -> List[RunwayProjectionRow]:
    """
    Build the month-ordered runway projection.

    Args:
        budgets: Monthly budget allocations (expense forecast)
        cash_flows: Planned, posted and void cash flow entries
        snapshots: Balance snapshots of runway-eligible accounts
        warning_balance_threshold: Balances below this are yellow
        danger_balance_threshold: Balances below this are red
        months_to_project: Minimum number of months to emit

    Returns:
        One RunwayProjectionRow per month from the latest snapshot month
        through the last month with data (or the requested horizon)

    Raises:
        ValidationError: On any malformed input
    """
    if not snapshots:
        raise ValidationError("No account snapshots available for runway projection")

    warning_threshold = ensure_finite_number(warning_balance_threshold, "warning balance threshold")
    danger_threshold = ensure_finite_number(danger_balance_threshold, "danger balance threshold")

    latest_by_account = _latest_snapshots(snapshots)
    if not latest_by_account:
        raise ValidationError("No account snapshots available for runway projection")

    start_month_key = max(snapshot.month_key for snapshot in latest_by_account.values())
    starting_balance = sum((snapshot.balance for snapshot in latest_by_account.values()), ZERO)
    end_month_key = start_month_key

    # =========================================================================
    # Bucket budgets and cash flows by month key
    # =========================================================================
    budget_totals: Dict[int, Decimal] = defaultdict(Decimal)

    for budget in budgets:
        month = ensure_integer(budget.month, "budget month")
        year = ensure_integer(budget.year, "budget year")
        amount = ensure_finite_number(budget.amount, "budget amount")

        if month < 1 or month > 12:
            raise ValidationError("Invalid budget month: must be between 1 and 12", "budget month")

        month_key = create_month_key(year, month)
        if month_key < start_month_key:
            continue

        budget_totals[month_key] += amount
        end_month_key = max(end_month_key, month_key)

    posted_income: Dict[int, Decimal] = defaultdict(Decimal)
    posted_expense: Dict[int, Decimal] = defaultdict(Decimal)
    planned_income: Dict[int, Decimal] = defaultdict(Decimal)
    planned_expense: Dict[int, Decimal] = defaultdict(Decimal)

    for flow in cash_flows:
        if flow.status == CashFlowStatus.VOID:
            continue

        if flow.type not in (CashFlowType.INCOME, CashFlowType.EXPENSE):
            raise ValidationError(f"Invalid cash flow type: {flow.type}", "cash flow type")

        if flow.status not in (CashFlowStatus.PLANNED, CashFlowStatus.POSTED):
            raise ValidationError(f"Unsupported cash flow status: {flow.status}", "cash flow status")

        identifier = flow.flow_id or f"{_enum_value(flow.type)}-{_enum_value(flow.status)}"

        if flow.status == CashFlowStatus.POSTED:
            date_source = flow.actual_date if flow.actual_date is not None else flow.planned_date
            parsed = parse_date_to_month_parts(date_source, f"cash flow date for {identifier}")
            if parsed.month_key < start_month_key:
                continue

            amount_source = flow.actual_amount if flow.actual_amount is not None else flow.planned_amount
            amount = ensure_finite_number(amount_source, f"cash flow posted amount for {identifier}")
            target = posted_income if flow.type == CashFlowType.INCOME else posted_expense
        else:
            parsed = parse_date_to_month_parts(flow.planned_date, f"cash flow planned date for {identifier}")
            if parsed.month_key < start_month_key:
                continue

            amount = ensure_finite_number(flow.planned_amount, f"cash flow planned amount for {identifier}")
            target = planned_income if flow.type == CashFlowType.INCOME else planned_expense

        target[parsed.month_key] += amount
        end_month_key = max(end_month_key, parsed.month_key)

    if months_to_project is not None:
        projection_length = ensure_integer(months_to_project, "months to project")
        if projection_length < 1:
            raise ValidationError("Invalid months to project: must be at least 1", "months to project")
        end_month_key = max(end_month_key, start_month_key + projection_length - 1)

    logger.debug(
        f"Projecting runway from month key {start_month_key} to {end_month_key} "
        f"across {len(latest_by_account)} accounts (starting balance {starting_balance})"
    )

    # =========================================================================
    # Walk the months, chaining projected ending balances
    # =========================================================================
    rows: List[RunwayProjectionRow] = []
    current_starting_balance = starting_balance

    for month_key in range(start_month_key, end_month_key + 1):
        year, month = month_key_to_parts(month_key)

        budget_total = budget_totals.get(month_key, ZERO)
        actual_income_total = posted_income.get(month_key, ZERO)
        actual_expense_total = posted_expense.get(month_key, ZERO)
        planned_income_total = planned_income.get(month_key, ZERO)
        planned_expense_total = planned_expense.get(month_key, ZERO)

        projected_income_total = actual_income_total + planned_income_total
        projected_expense_total = actual_expense_total + planned_expense_total + budget_total

        actual_ending_balance = current_starting_balance + actual_income_total - actual_expense_total
        projected_ending_balance = (
            current_starting_balance + projected_income_total - projected_expense_total
        )

        rows.append(RunwayProjectionRow(
            month=month,
            year=year,
            starting_balance=normalize_zero(current_starting_balance),
            actual_income_total=normalize_zero(actual_income_total),
            projected_income_total=normalize_zero(projected_income_total),
            actual_expense_total=normalize_zero(actual_expense_total),
            projected_expense_total=normalize_zero(projected_expense_total),
            actual_ending_balance=normalize_zero(actual_ending_balance),
            projected_ending_balance=normalize_zero(projected_ending_balance),
            stoplight_status=resolve_stoplight(
                projected_ending_balance, warning_threshold, danger_threshold
            ),
            notes="",
        ))

        current_starting_balance = projected_ending_balance

    return rows


def summarize_runway(rows: List[RunwayProjectionRow]) -> RunwaySummary:
    """Lowest projected balance, first red month and counts per stoplight band."""
    summary = RunwaySummary(
        months=len(rows),
        months_by_status={status.value: 0 for status in StoplightStatus},
    )

    for row in rows:
        month_id = f"{row.year}-{row.month:02d}"
        status = StoplightStatus(row.stoplight_status)
        summary.months_by_status[status.value] += 1

        if summary.lowest_balance is None or row.projected_ending_balance < summary.lowest_balance:
            summary.lowest_balance = row.projected_ending_balance
            summary.lowest_balance_month = month_id

        if status == StoplightStatus.RED and summary.first_red_month is None:
            summary.first_red_month = month_id

    return summary


def _enum_value(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)
