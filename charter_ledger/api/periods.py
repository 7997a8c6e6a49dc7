"""
Financial period endpoints.

Periods are addressed as YYYY-MM. A period with no record is open.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from charter_ledger.exceptions import LedgerError
from charter_ledger.models.base import get_db
from charter_ledger.models.enums import PeriodStatus
from charter_ledger.models.financial_period import FinancialPeriod
from charter_ledger.services.period_service import PeriodService
from charter_ledger.schemas.settings import (
    PERIOD_PATTERN,
    FinancialPeriodResponse,
    PeriodCloseRequest,
)
from charter_ledger.api.errors import http_error

router = APIRouter(prefix="/companies/{company_id}/periods", tags=["Financial Periods"])


@router.get("", response_model=list[FinancialPeriodResponse])
def list_periods(company_id: str, db: Session = Depends(get_db)):
    return PeriodService(db).list_periods(company_id)


@router.get("/{period}", response_model=FinancialPeriodResponse)
def get_period(
    company_id: str,
    period: str = Path(pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
):
    record = PeriodService(db).get_period(company_id, period)
    if record is None:
        record = FinancialPeriod(company_id=company_id, period=period, status=PeriodStatus.OPEN)
    return record


@router.post("/{period}/close", response_model=FinancialPeriodResponse)
def close_period(
    company_id: str,
    request: PeriodCloseRequest,
    period: str = Path(pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
):
    """Close a period. Journal writes dated inside it are rejected."""
    try:
        record = PeriodService(db).close_period(
            company_id, period, request.closed_by, request.notes
        )
        db.commit()
        return record
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{period}/reopen", response_model=FinancialPeriodResponse)
def reopen_period(
    company_id: str,
    period: str = Path(pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
):
    try:
        record = PeriodService(db).reopen_period(company_id, period)
        db.commit()
        return record
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.post("/{period}/lock", response_model=FinancialPeriodResponse)
def lock_period(
    company_id: str,
    request: PeriodCloseRequest,
    period: str = Path(pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
):
    """Lock a period for good. A locked period cannot be reopened."""
    record = PeriodService(db).lock_period(company_id, period, request.closed_by, request.notes)
    db.commit()
    return record
