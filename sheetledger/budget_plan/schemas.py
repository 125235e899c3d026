"""Budget plan record schemas exchanged with the ledger store."""
from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class CategoryRecord(BaseModel):
    """A spending category with its default monthly budget."""
    category_id: str
    label: str
    color: str = ""
    rollover_flag: bool = False
    monthly_budget: Decimal = Decimal("0")
    sort_order: int = 0
    currency_code: str = "USD"


class BudgetPlanRecord(BaseModel):
    """Planned amount for one category in one month."""
    record_id: str
    category_id: str
    month: int
    year: int
    amount: Decimal
    rollover_balance: Decimal = Decimal("0")
    currency: Optional[str] = None
