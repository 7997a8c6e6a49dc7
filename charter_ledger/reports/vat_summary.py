"""
Monthly VAT summary from the VAT receivable and payable accounts.

input VAT  = debits - credits on VAT receivable
output VAT = credits - debits on VAT payable
net VAT    = output - input (positive: payable, negative: refundable)
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.config import DefaultAccounts
from charter_ledger.models.enums import EntryStatus, EntryType
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.reports.periods import month_key, month_label, months_between
from charter_ledger.reports.project_pl import ALL_COMPANIES
from charter_ledger.schemas.reports import VatStatus, VatSummaryReport, VatSummaryRow

ZERO = Decimal("0")


def vat_status(net_vat: Decimal) -> VatStatus:
    if net_vat > 0:
        return VatStatus.PAYABLE
    if net_vat < 0:
        return VatStatus.REFUNDABLE
    return VatStatus.ZERO


class VatSummaryService:

    def __init__(self, db: Session):
        self.db = db

    def build(
        self,
        company_id: str,
        date_from: date,
        date_to: date,
        statuses: list[EntryStatus] | None = None,
    ) -> VatSummaryReport:
        """Monthly VAT for one company, or for every company with company_id "all"."""
        if date_to < date_from:
            raise ValueError("date_to must not be before date_from")

        months = months_between(date_from, date_to)
        input_vat = {month_key(m): ZERO for m in months}
        output_vat = {month_key(m): ZERO for m in months}

        query = (
            select(JournalEntry.entry_date, JournalEntryLine.account_code,
                   JournalEntryLine.entry_type, JournalEntryLine.amount)
            .join(JournalEntryLine, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.deleted_at.is_(None),
                JournalEntry.status.in_(statuses or [EntryStatus.POSTED]),
                JournalEntry.entry_date >= date_from,
                JournalEntry.entry_date <= date_to,
                JournalEntryLine.account_code.in_(
                    (DefaultAccounts.VAT_RECEIVABLE, DefaultAccounts.VAT_PAYABLE)
                ),
            )
        )
        if company_id != ALL_COMPANIES:
            query = query.where(JournalEntry.company_id == company_id)
        lines = self.db.execute(query).all()

        for entry_date, account_code, entry_type, amount in lines:
            key = month_key(entry_date)
            amount = Decimal(amount)
            if account_code == DefaultAccounts.VAT_RECEIVABLE:
                input_vat[key] += amount if entry_type == EntryType.DEBIT else -amount
            else:
                output_vat[key] += amount if entry_type == EntryType.CREDIT else -amount

        rows = []
        for month in months:
            key = month_key(month)
            net = output_vat[key] - input_vat[key]
            rows.append(VatSummaryRow(
                period=key,
                label=month_label(month),
                input_vat=input_vat[key],
                output_vat=output_vat[key],
                net_vat=net,
                status=vat_status(net),
            ))

        total_input = sum((r.input_vat for r in rows), ZERO)
        total_output = sum((r.output_vat for r in rows), ZERO)
        return VatSummaryReport(
            company_id=company_id,
            date_from=date_from,
            date_to=date_to,
            rows=rows,
            total=VatSummaryRow(
                period="TOTAL",
                label="Total",
                input_vat=total_input,
                output_vat=total_output,
                net_vat=total_output - total_input,
                status=vat_status(total_output - total_input),
            ),
        )
