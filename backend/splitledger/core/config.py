"""
Application configuration and environment settings.
"""
from decimal import Decimal
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "SplitLedger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Display currency for new groups (no conversion is ever performed)
    DEFAULT_CURRENCY: str = "USD"
    SUPPORTED_CURRENCIES: List[str] = ["USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "INR", "LKR"]

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Tolerances
    PERCENTAGE_TOLERANCE: Decimal = Decimal("0.01")  # |sum(percentages) - 100|
    AMOUNT_TOLERANCE: Decimal = Decimal("0.05")  # custom amounts / item prices vs. expense amount
    SETTLEMENT_THRESHOLD: Decimal = Decimal("0.01")  # balances and transfers below this are noise
    BALANCE_TOLERANCE: Decimal = Decimal("0.05")  # |sum(balances)| before a reconciliation warning

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
