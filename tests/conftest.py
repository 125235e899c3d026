"""Shared test fixtures for the SheetLedger tests."""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

from sheetledger.budget_plan.schemas import BudgetPlanRecord, CategoryRecord
from sheetledger.collaborators import BudgetPlanStore, RunwayDataSource, SpreadsheetScope


@pytest.fixture
def scope():
    return SpreadsheetScope(spreadsheet_id="sheet-123")


@pytest.fixture
def categories():
    """Three categories, deliberately out of sort order."""
    return [
        CategoryRecord(
            category_id="dining",
            label="Dining",
            color="#ff0000",
            rollover_flag=False,
            monthly_budget=Decimal("300"),
            sort_order=2,
            currency_code="usd",
        ),
        CategoryRecord(
            category_id="groceries",
            label="Groceries",
            color="#00ff00",
            rollover_flag=True,
            monthly_budget=Decimal("200"),
            sort_order=1,
            currency_code="USD",
        ),
        CategoryRecord(
            category_id="travel",
            label="Travel",
            color="#0000ff",
            rollover_flag=True,
            monthly_budget=Decimal("100"),
            sort_order=3,
            currency_code="EUR",
        ),
    ]


@pytest.fixture
def budget_plan_records():
    """Stored records for groceries in the first two months of 2025."""
    return [
        BudgetPlanRecord(
            record_id="rec-jan",
            category_id="groceries",
            month=1,
            year=2025,
            amount=Decimal("150"),
        ),
        BudgetPlanRecord(
            record_id="rec-feb",
            category_id="groceries",
            month=2,
            year=2025,
            amount=Decimal("250"),
        ),
    ]


@pytest.fixture
def start_date():
    return date(2025, 1, 15)


@pytest.fixture
def runway_data_source():
    """A RunwayDataSource whose methods are AsyncMocks."""
    return AsyncMock(spec=RunwayDataSource)


@pytest.fixture
def budget_plan_store():
    """A BudgetPlanStore whose methods are AsyncMocks."""
    return AsyncMock(spec=BudgetPlanStore)
