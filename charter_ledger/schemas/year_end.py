"""Schemas for the fiscal year-end close."""

from decimal import Decimal

from pydantic import BaseModel

from charter_ledger.schemas.journal import PostingResult


class PreCloseCheck(BaseModel):
    """What stands between a fiscal year and its close."""
    company_id: str
    fiscal_year: str
    open_periods: list[str]
    draft_entry_count: int
    trial_balance_difference: Decimal
    is_balanced: bool
    ready: bool


class YearEndCloseResult(PostingResult):
    """
    PostingResult of a year-end close.

    journal_entry_id is empty when the year had no revenue or
    expense to close; the periods are locked either way.
    """
    fiscal_year: str | None = None
    net_income: Decimal = Decimal("0")
    revenue_accounts_closed: int = 0
    expense_accounts_closed: int = 0
    periods_locked: list[str] = []
