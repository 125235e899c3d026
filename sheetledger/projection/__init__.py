"""Projection module - monthly cash runway projection."""
from sheetledger.projection import engine, schemas

__all__ = ["engine", "schemas"]
