"""SheetLedger - runway projection and budget envelope engine."""

__version__ = "0.1.0"
