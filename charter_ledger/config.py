"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Charter Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/charter_ledger"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Ledger
    BASE_CURRENCY: str = os.getenv("BASE_CURRENCY", "THB")
    BALANCE_TOLERANCE: Decimal = Decimal(os.getenv("BALANCE_TOLERANCE", "0.01"))
    FISCAL_YEAR_START_MONTH: int = int(os.getenv("FISCAL_YEAR_START_MONTH", "11"))


class DefaultAccounts:
    """
    System default account codes used by the journal line builders.

    Companies can override the expense/revenue fallbacks per event
    type through journal event settings. Everything else is fixed.
    """

    CASH = "1000"
    DEFAULT_BANK = "1010"
    CREDIT_CARD_RECEIVABLE = "1140"
    VAT_RECEIVABLE = "1170"
    ACCOUNTS_PAYABLE = "2050"
    VAT_PAYABLE = "2200"
    DEFERRED_REVENUE = "2300"
    RETAINED_EARNINGS = "3200"
    DEFAULT_REVENUE = "4490"
    PROCESSING_FEES = "6710"
    DEFAULT_EXPENSE = "6790"


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
