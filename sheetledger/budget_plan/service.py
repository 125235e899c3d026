"""Loads budget plan grids from the store and saves edited drafts back."""
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel

from sheetledger.budget_plan.draft import BudgetPlanDraft, serialize_budget_plan_draft
from sheetledger.budget_plan.grid import BudgetPlanGrid, build_budget_plan_grid
from sheetledger.collaborators import BudgetPlanStore, SpreadsheetScope
from sheetledger.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class BudgetPlanSaveResult(BaseModel):
    updated_at: str
    records_written: int


class BudgetPlanService:
    """Budget plan load/save on top of an injected store."""

    def __init__(
        self,
        store: BudgetPlanStore,
        settings: Optional[Settings] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.settings = settings or default_settings
        self.now = now or (lambda: datetime.now(timezone.utc))

    async def load_grid(
        self,
        scope: SpreadsheetScope,
        start_date: Optional[date] = None,
        horizon: Optional[int] = None,
    ) -> BudgetPlanGrid:
        """Build a fresh grid from the stored categories and records."""
        categories, records = await asyncio.gather(
            self.store.load_categories(scope),
            self.store.load_budget_plan_records(scope),
        )

        grid = build_budget_plan_grid(
            categories=categories,
            budget_plan=records,
            start_date=start_date or self.now().date(),
            horizon=self.settings.BUDGET_PLAN_HORIZON_MONTHS if horizon is None else horizon,
            default_currency=self.settings.DEFAULT_CURRENCY,
        )

        logger.debug(
            f"Built budget plan grid for spreadsheet {scope.spreadsheet_id}: "
            f"{len(grid.rows)} categories x {len(grid.months)} months"
        )
        return grid

    async def save_draft(self, scope: SpreadsheetScope, draft: BudgetPlanDraft) -> BudgetPlanSaveResult:
        """Persist every cell of draft in a single write."""
        records = serialize_budget_plan_draft(draft)
        await self.store.save_budget_plan_records(scope, records)

        logger.info(
            f"Saved {len(records)} budget plan records for spreadsheet {scope.spreadsheet_id}"
        )

        return BudgetPlanSaveResult(
            updated_at=self.now().isoformat(),
            records_written=len(records),
        )
