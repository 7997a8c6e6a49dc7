"""
Pydantic schemas for the chart of accounts.

These define the API contract for account administration. They
are kept apart from the database models because the API shape
and the storage shape are often different.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from charter_ledger.models.enums import AccountType, NormalBalance


NORMAL_BALANCE_BY_TYPE = {
    AccountType.ASSET: NormalBalance.DEBIT,
    AccountType.EXPENSE: NormalBalance.DEBIT,
    AccountType.LIABILITY: NormalBalance.CREDIT,
    AccountType.EQUITY: NormalBalance.CREDIT,
    AccountType.REVENUE: NormalBalance.CREDIT,
}


# --- Request Schemas ---

class LedgerAccountCreate(BaseModel):
    """
    Request to create a new ledger account.

    normal_balance may be omitted, in which case it follows the
    account type (debit for assets and expenses, credit otherwise).
    """
    code: str = Field(min_length=1, max_length=20, pattern=r"^[0-9A-Za-z.\-]+$")
    name: str = Field(min_length=1, max_length=150)
    account_type: AccountType
    normal_balance: NormalBalance | None = None
    category: str | None = Field(default=None, max_length=100)
    sub_type: str | None = Field(default=None, max_length=100)
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @model_validator(mode="after")
    def default_normal_balance(self) -> "LedgerAccountCreate":
        if self.normal_balance is None:
            self.normal_balance = NORMAL_BALANCE_BY_TYPE[self.account_type]
        return self


# --- Response Schemas ---

class LedgerAccountResponse(BaseModel):
    """Ledger account in API responses."""
    id: int
    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    category: str | None
    sub_type: str | None
    currency: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SeedChartResponse(BaseModel):
    created: int
    skipped: int


class AccountBalanceResponse(BaseModel):
    """Balance of one account, on its normal side."""
    account_code: str
    account_name: str
    account_type: AccountType
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal
