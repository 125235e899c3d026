"""Runway projection record schemas exchanged with the ledger store."""
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal


class SnapshotRecord(BaseModel):
    """A stored account balance snapshot."""
    snapshot_id: str
    account_id: str
    date: str
    balance: Decimal
    note: str = ""


class AccountRecord(BaseModel):
    """A ledger account."""
    account_id: str
    name: str
    type: str
    currency: str
    include_in_runway: bool = False
    snapshot_frequency: str = ""
    last_snapshot_at: Optional[str] = None


class AccountWarning(BaseModel):
    """A row-level problem reported while loading accounts."""
    row_number: Optional[int] = None
    message: str


class AccountsDiagnostics(BaseModel):
    """Accounts plus the warnings produced while loading them."""
    accounts: List[AccountRecord] = Field(default_factory=list)
    warnings: List[AccountWarning] = Field(default_factory=list)


class CashFlowRecord(BaseModel):
    """A stored planned or posted cash flow."""
    flow_id: str
    type: str
    category_id: str = ""
    planned_date: str
    planned_amount: Decimal
    actual_date: Optional[str] = None
    actual_amount: Optional[Decimal] = None
    status: str
    account_id: str = ""
    note: str = ""


class RunwayProjectionRecord(BaseModel):
    """A persisted runway projection row (projected figures only)."""
    month: int
    year: int
    starting_balance: Decimal
    income_total: Decimal
    expense_total: Decimal
    ending_balance: Decimal
    stoplight_status: str
    notes: str = ""


class RunwayProjectionRefreshResult(BaseModel):
    """Outcome of a projection refresh."""
    updated_at: str
    rows_written: int
