"""
Collaborator interfaces for the ledger store.

The engines never read or write storage themselves. Spreadsheet (or any
other) backends implement these interfaces and are injected into the
refresh orchestrator and the budget plan service. Retries, backoff and
cancellation are the implementation's concern.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from sheetledger.budget_plan.schemas import BudgetPlanRecord, CategoryRecord
from sheetledger.projection.schemas import (
    AccountsDiagnostics,
    CashFlowRecord,
    RunwayProjectionRecord,
    SnapshotRecord,
)
from sheetledger.validation import ValidationError


@dataclass(frozen=True)
class SpreadsheetScope:
    """Identifies the user's ledger spreadsheet."""
    spreadsheet_id: str

    def __post_init__(self):
        if not isinstance(self.spreadsheet_id, str) or not self.spreadsheet_id.strip():
            raise ValidationError("Missing spreadsheet_id", "spreadsheet_id")

    @classmethod
    def of(cls, spreadsheet_id: str) -> "SpreadsheetScope":
        """Build a scope from a raw id, trimming whitespace."""
        if not isinstance(spreadsheet_id, str):
            raise ValidationError("Missing spreadsheet_id", "spreadsheet_id")
        return cls(spreadsheet_id=spreadsheet_id.strip())


class RunwayDataSource(ABC):
    """Loads runway inputs and stores the resulting projection."""

    @abstractmethod
    async def load_budgets(self, scope: SpreadsheetScope) -> List[BudgetPlanRecord]:
        """Per-category budget plan records."""
        pass

    @abstractmethod
    async def load_cash_flows(self, scope: SpreadsheetScope) -> List[CashFlowRecord]:
        pass

    @abstractmethod
    async def load_snapshots(self, scope: SpreadsheetScope) -> List[SnapshotRecord]:
        pass

    @abstractmethod
    async def load_accounts(self, scope: SpreadsheetScope) -> AccountsDiagnostics:
        pass

    @abstractmethod
    async def save_projection(
        self,
        scope: SpreadsheetScope,
        rows: List[RunwayProjectionRecord],
    ) -> None:
        """Replace the stored projection with rows."""
        pass


class BudgetPlanStore(ABC):
    """Loads and saves categories and budget plan records."""

    @abstractmethod
    async def load_categories(self, scope: SpreadsheetScope) -> List[CategoryRecord]:
        pass

    @abstractmethod
    async def load_budget_plan_records(self, scope: SpreadsheetScope) -> List[BudgetPlanRecord]:
        pass

    @abstractmethod
    async def save_budget_plan_records(
        self,
        scope: SpreadsheetScope,
        records: List[BudgetPlanRecord],
    ) -> None:
        pass
