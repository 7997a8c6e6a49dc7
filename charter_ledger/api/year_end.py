"""
Fiscal year-end endpoints.

Fiscal years are addressed as YYYY-YYYY, for example 2024-2025.
"""

from fastapi import APIRouter, Depends, Header, Path
from sqlalchemy.orm import Session

from charter_ledger.exceptions import LedgerError
from charter_ledger.models.base import get_db
from charter_ledger.services.posting_service import JournalPostingService
from charter_ledger.services.year_end_close import YearEndCloseService
from charter_ledger.schemas.year_end import PreCloseCheck, YearEndCloseResult
from charter_ledger.api.errors import http_error, raise_for_result

router = APIRouter(prefix="/companies/{company_id}/year-end", tags=["Year End"])

FISCAL_YEAR_PATTERN = r"^\d{4}-\d{4}$"


@router.get("/{fiscal_year}/checks", response_model=PreCloseCheck)
def pre_close_checks(
    company_id: str,
    fiscal_year: str = Path(pattern=FISCAL_YEAR_PATTERN),
    db: Session = Depends(get_db),
):
    try:
        return YearEndCloseService(db).run_pre_close_checks(company_id, fiscal_year)
    except LedgerError as e:
        raise http_error(e)


@router.post("/{fiscal_year}/close", response_model=YearEndCloseResult)
def close_year(
    company_id: str,
    fiscal_year: str = Path(pattern=FISCAL_YEAR_PATTERN),
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    """Post the closing entry and lock every month of the year."""
    result = JournalPostingService(db).close_fiscal_year(company_id, fiscal_year, user)
    if not result.success:
        db.rollback()
        raise_for_result(result)
    db.commit()
    return result
