"""
Reporting endpoints.

Every report is a pure read. Pass format=csv to download the
report as CSV instead of JSON.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from charter_ledger.models.base import get_db
from charter_ledger.models.enums import EntryStatus
from charter_ledger.reports import csv_export
from charter_ledger.reports.aging import build_aging_report
from charter_ledger.reports.numbering_gaps import reference_gap_report
from charter_ledger.reports.project_pl import ALL_COMPANIES, ProjectPLService
from charter_ledger.reports.trial_balance import TrialBalanceService
from charter_ledger.reports.vat_summary import VatSummaryService
from charter_ledger.schemas.reports import (
    AgingReport,
    AgingRequest,
    DrillDownDirection,
    DrillDownRow,
    ProjectPLReport,
    ReferenceGapReport,
    TrialBalanceReport,
    VatSummaryReport,
)
from charter_ledger.schemas.settings import PERIOD_PATTERN

router = APIRouter(prefix="/reports", tags=["Reports"])

FORMAT_PATTERN = "^(json|csv)$"


def _csv(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/project-pl", response_model=ProjectPLReport)
def project_pl(
    fiscal_year: str,
    company_id: str = ALL_COMPANIES,
    project_id: str | None = None,
    management_fee_percent: Decimal = Query(Decimal("0"), ge=0, le=100),
    status: list[EntryStatus] | None = Query(None),
    fmt: str = Query("json", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
):
    """Monthly P&L for a fiscal year (November to October), plus a total row."""
    try:
        report = ProjectPLService(db).build(
            fiscal_year, company_id, project_id, management_fee_percent, status
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if fmt == "csv":
        return _csv(csv_export.project_pl_csv(report), f"project-pl-{fiscal_year}.csv")
    return report


@router.get("/project-pl/drill-down", response_model=list[DrillDownRow])
def project_pl_drill_down(
    month: str = Query(pattern=PERIOD_PATTERN),
    direction: DrillDownDirection = DrillDownDirection.INCOME,
    company_id: str = ALL_COMPANIES,
    project_id: str | None = None,
    category: str | None = None,
    status: list[EntryStatus] | None = Query(None),
    fmt: str = Query("json", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
):
    """The transactions behind one month's income or expense figure."""
    year, month_number = (int(part) for part in month.split("-"))
    rows = ProjectPLService(db).drill_down(
        date(year, month_number, 1), direction, company_id, project_id, category, status
    )
    if fmt == "csv":
        return _csv(csv_export.drill_down_csv(rows), f"{direction.value}-{month}.csv")
    return rows


@router.post("/aging", response_model=AgingReport)
def aging(
    request: AgingRequest,
    fmt: str = Query("json", alias="format", pattern=FORMAT_PATTERN),
):
    report = build_aging_report(request.documents, request.as_of_date, request.kind)
    if fmt == "csv":
        return _csv(csv_export.aging_csv(report), f"{request.kind.value}-aging.csv")
    return report


@router.get("/vat-summary", response_model=VatSummaryReport)
def vat_summary(
    date_from: date,
    date_to: date,
    company_id: str = ALL_COMPANIES,
    status: list[EntryStatus] | None = Query(None),
    fmt: str = Query("json", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
):
    try:
        report = VatSummaryService(db).build(company_id, date_from, date_to, status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if fmt == "csv":
        return _csv(csv_export.vat_summary_csv(report), "vat-summary.csv")
    return report


@router.get("/trial-balance", response_model=TrialBalanceReport)
def trial_balance(
    company_id: str,
    as_of_date: date,
    fmt: str = Query("json", alias="format", pattern=FORMAT_PATTERN),
    db: Session = Depends(get_db),
):
    report = TrialBalanceService(db).build(company_id, as_of_date)
    if fmt == "csv":
        return _csv(csv_export.trial_balance_csv(report), f"trial-balance-{as_of_date}.csv")
    return report


@router.get("/reference-gaps", response_model=ReferenceGapReport)
def reference_gaps(company_id: str, db: Session = Depends(get_db)):
    return reference_gap_report(db, company_id)
