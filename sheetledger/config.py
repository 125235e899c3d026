"""Application configuration."""
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Runway projection
    WARNING_BALANCE_THRESHOLD: Decimal = Decimal("5000")
    DANGER_BALANCE_THRESHOLD: Decimal = Decimal("2000")

    # Budget plan
    BUDGET_PLAN_HORIZON_MONTHS: int = 12
    DEFAULT_CURRENCY: str = "USD"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )


settings = Settings()
