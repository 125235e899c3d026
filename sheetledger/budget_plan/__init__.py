"""Budget plan module - rolling budget grid, rollover envelopes and drafts."""
from sheetledger.budget_plan import draft, grid, rollover, schemas

__all__ = ["draft", "grid", "rollover", "schemas"]
