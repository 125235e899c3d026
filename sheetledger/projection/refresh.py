"""
Runway projection refresh.

Rebuilds the stored runway projection:
1. Load budgets, cash flows, snapshots and accounts concurrently
2. Sum budgets per month and keep snapshots of runway accounts only
3. Run the projection engine
4. Save the projected rows in a single write

Loader and saver failures propagate unchanged to the caller.
"""
import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from sheetledger.budget_plan.schemas import BudgetPlanRecord
from sheetledger.collaborators import RunwayDataSource, SpreadsheetScope
from sheetledger.config import Settings, settings as default_settings
from sheetledger.projection.engine import (
    AccountSnapshotBalance,
    CashFlowEntry,
    MonthlyBudgetAllocation,
    RunwayProjectionRow,
    build_runway_projection,
)
from sheetledger.projection.schemas import (
    AccountsDiagnostics,
    CashFlowRecord,
    RunwayProjectionRecord,
    RunwayProjectionRefreshResult,
    SnapshotRecord,
)

logger = logging.getLogger(__name__)


def aggregate_budgets(records: List[BudgetPlanRecord]) -> List[MonthlyBudgetAllocation]:
    """Sum category budgets per (year, month), in chronological order."""
    totals: Dict[Tuple[int, int], MonthlyBudgetAllocation] = {}

    for record in records:
        key = (record.year, record.month)
        existing = totals.get(key)
        if existing:
            existing.amount += record.amount
        else:
            totals[key] = MonthlyBudgetAllocation(
                month=record.month,
                year=record.year,
                amount=record.amount,
            )

    return [totals[key] for key in sorted(totals)]


def filter_runway_snapshots(
    snapshots: List[SnapshotRecord],
    accounts: AccountsDiagnostics,
) -> List[SnapshotRecord]:
    """Keep snapshots of accounts flagged include_in_runway."""
    runway_account_ids = {
        account.account_id
        for account in accounts.accounts
        if account.include_in_runway
    }

    if not runway_account_ids:
        return []

    return [snapshot for snapshot in snapshots if snapshot.account_id in runway_account_ids]


def map_cash_flows(records: List[CashFlowRecord]) -> List[CashFlowEntry]:
    return [
        CashFlowEntry(
            flow_id=record.flow_id,
            type=record.type,
            status=record.status,
            planned_date=record.planned_date,
            planned_amount=record.planned_amount,
            actual_date=record.actual_date or None,
            actual_amount=record.actual_amount,
        )
        for record in records
    ]


def map_snapshots(records: List[SnapshotRecord]) -> List[AccountSnapshotBalance]:
    return [
        AccountSnapshotBalance(
            account_id=record.account_id,
            date=record.date,
            balance=record.balance,
        )
        for record in records
    ]


def to_projection_records(rows: List[RunwayProjectionRow]) -> List[RunwayProjectionRecord]:
    """Persist the projected side of each row."""
    return [
        RunwayProjectionRecord(
            month=row.month,
            year=row.year,
            starting_balance=row.starting_balance,
            income_total=row.projected_income_total,
            expense_total=row.projected_expense_total,
            ending_balance=row.projected_ending_balance,
            stoplight_status=row.stoplight_status.value,
            notes=row.notes,
        )
        for row in rows
    ]


class RunwayProjectionRefresher:
    """
    Recomputes and stores the runway projection for a spreadsheet.

    Collaborators are injected; the refresher holds no state between runs.
    """

    def __init__(
        self,
        data_source: RunwayDataSource,
        settings: Optional[Settings] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.data_source = data_source
        self.settings = settings or default_settings
        self.now = now or (lambda: datetime.now(timezone.utc))

    async def refresh(
        self,
        scope: SpreadsheetScope,
        warning_balance_threshold: Optional[Decimal] = None,
        danger_balance_threshold: Optional[Decimal] = None,
        months_to_project: Optional[int] = None,
    ) -> RunwayProjectionRefreshResult:
        """
        Rebuild the projection for scope.

        Args:
            scope: Spreadsheet to refresh
            warning_balance_threshold: Overrides settings.WARNING_BALANCE_THRESHOLD
            danger_balance_threshold: Overrides settings.DANGER_BALANCE_THRESHOLD
            months_to_project: Minimum projection length

        Returns:
            RunwayProjectionRefreshResult with timestamp and rows written
        """
        if warning_balance_threshold is None:
            warning_balance_threshold = self.settings.WARNING_BALANCE_THRESHOLD
        if danger_balance_threshold is None:
            danger_balance_threshold = self.settings.DANGER_BALANCE_THRESHOLD

        budget_records, cash_flow_records, snapshot_records, accounts = await asyncio.gather(
            self.data_source.load_budgets(scope),
            self.data_source.load_cash_flows(scope),
            self.data_source.load_snapshots(scope),
            self.data_source.load_accounts(scope),
        )

        runway_snapshots = filter_runway_snapshots(snapshot_records, accounts)
        if not runway_snapshots:
            logger.warning(
                f"No runway-eligible snapshots for spreadsheet {scope.spreadsheet_id} "
                f"({len(snapshot_records)} snapshots, {len(accounts.accounts)} accounts)"
            )

        projection_rows = build_runway_projection(
            budgets=aggregate_budgets(budget_records),
            cash_flows=map_cash_flows(cash_flow_records),
            snapshots=map_snapshots(runway_snapshots),
            warning_balance_threshold=warning_balance_threshold,
            danger_balance_threshold=danger_balance_threshold,
            months_to_project=months_to_project,
        )

        records = to_projection_records(projection_rows)
        await self.data_source.save_projection(scope, records)

        logger.info(
            f"Runway projection refreshed for spreadsheet {scope.spreadsheet_id}: "
            f"{len(records)} rows"
        )

        return RunwayProjectionRefreshResult(
            updated_at=self.now().isoformat(),
            rows_written=len(records),
        )
