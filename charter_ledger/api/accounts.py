"""
Chart of accounts API endpoints.

Accounts are created, listed and deactivated here. They are never
deleted.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from charter_ledger.exceptions import LedgerError
from charter_ledger.models.base import get_db
from charter_ledger.models.enums import AccountType
from charter_ledger.services.chart_of_accounts import ChartOfAccountsService
from charter_ledger.services.journal_service import JournalEntryService
from charter_ledger.schemas.ledger import (
    AccountBalanceResponse,
    LedgerAccountCreate,
    LedgerAccountResponse,
    SeedChartResponse,
)
from charter_ledger.api.errors import http_error

router = APIRouter(prefix="/accounts", tags=["Chart of Accounts"])


@router.post("", response_model=LedgerAccountResponse, status_code=201)
def create_account(
    request: LedgerAccountCreate,
    db: Session = Depends(get_db),
):
    """Create a new ledger account."""
    service = ChartOfAccountsService(db)
    try:
        account = service.create(request)
        db.commit()
        return account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/seed", response_model=SeedChartResponse)
def seed_default_chart(db: Session = Depends(get_db)):
    """Load the built-in chart. Codes that already exist are skipped."""
    created, skipped = ChartOfAccountsService(db).seed_default_chart()
    db.commit()
    return SeedChartResponse(created=created, skipped=skipped)


@router.get("", response_model=list[LedgerAccountResponse])
def list_accounts(
    account_type: AccountType | None = None,
    active_only: bool = True,
    db: Session = Depends(get_db),
):
    service = ChartOfAccountsService(db)
    if account_type:
        accounts = service.list_by_type(account_type)
        return [a for a in accounts if a.is_active or not active_only]
    if active_only:
        return service.list_active()
    return service.list_all()


@router.get("/{code}", response_model=LedgerAccountResponse)
def get_account(code: str, db: Session = Depends(get_db)):
    try:
        return ChartOfAccountsService(db).get_by_code(code)
    except LedgerError as e:
        raise http_error(e)


@router.post("/{code}/deactivate", response_model=LedgerAccountResponse)
def deactivate_account(code: str, db: Session = Depends(get_db)):
    """Deactivate an account. Existing entries keep pointing at it."""
    try:
        account = ChartOfAccountsService(db).deactivate(code)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{code}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    code: str,
    company_id: str | None = None,
    as_of: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Balance of an account from posted entries.

    Balance is calculated from lines, never stored.
    """
    service = JournalEntryService(db)
    try:
        account = service.accounts.get_by_code(code)
        total_debit, total_credit, balance = service.get_account_balance(
            code, company_id, as_of
        )
    except LedgerError as e:
        raise http_error(e)

    return AccountBalanceResponse(
        account_code=account.code,
        account_name=account.name,
        account_type=account.account_type,
        total_debit=total_debit,
        total_credit=total_credit,
        balance=balance,
    )
