"""
Profit and loss by project.

Income is credits minus debits on Revenue accounts, expense is
debits minus credits on Expense accounts. The management fee is a
percentage of income and comes off before profit.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.enums import AccountType, EntryStatus, EntryType
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.models.ledger_account import LedgerAccount
from charter_ledger.reports.periods import fiscal_months, month_end, month_key, month_label
from charter_ledger.schemas.journal import Attachment
from charter_ledger.schemas.reports import (
    DrillDownDirection,
    DrillDownRow,
    ProjectPLReport,
    ProjectPLRow,
)

ALL_COMPANIES = "all"
DEFAULT_STATUSES = (EntryStatus.POSTED, EntryStatus.DRAFT)
CENT = Decimal("0.01")
ZERO = Decimal("0")


def signed_amount(account_type: AccountType, entry_type: EntryType, amount: Decimal) -> Decimal:
    """Amount as it moves income (Revenue) or expense (Expense) upward."""
    if account_type == AccountType.REVENUE:
        return amount if entry_type == EntryType.CREDIT else -amount
    return amount if entry_type == EntryType.DEBIT else -amount


def management_fee(income: Decimal, percent: Decimal) -> Decimal:
    return (income * percent / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)


class ProjectPLService:

    def __init__(self, db: Session):
        self.db = db

    def _line_query(self, company_id, project_id, statuses, date_from, date_to):
        query = (
            select(JournalEntry, JournalEntryLine, LedgerAccount)
            .join(JournalEntryLine, JournalEntryLine.journal_entry_id == JournalEntry.id)
            .join(LedgerAccount, LedgerAccount.code == JournalEntryLine.account_code)
            .where(
                JournalEntry.deleted_at.is_(None),
                JournalEntry.status.in_(statuses or DEFAULT_STATUSES),
                JournalEntry.entry_date >= date_from,
                JournalEntry.entry_date <= date_to,
                LedgerAccount.account_type.in_((AccountType.REVENUE, AccountType.EXPENSE)),
            )
        )
        if company_id and company_id != ALL_COMPANIES:
            query = query.where(JournalEntry.company_id == company_id)
        if project_id:
            query = query.where(JournalEntryLine.project_id == project_id)
        return query

    def build(
        self,
        fiscal_year: str,
        company_id: str = ALL_COMPANIES,
        project_id: str | None = None,
        management_fee_percent: Decimal = ZERO,
        statuses: list[EntryStatus] | None = None,
    ) -> ProjectPLReport:
        months = fiscal_months(fiscal_year)
        income = {month_key(m): ZERO for m in months}
        expense = {month_key(m): ZERO for m in months}

        rows = self.db.execute(self._line_query(
            company_id, project_id, statuses, months[0], month_end(months[-1])
        )).all()
        for entry, line, account in rows:
            key = month_key(entry.entry_date)
            amount = signed_amount(account.account_type, line.entry_type, Decimal(line.amount))
            if account.account_type == AccountType.REVENUE:
                income[key] += amount
            else:
                expense[key] += amount

        report_rows = []
        for month in months:
            key = month_key(month)
            fee = management_fee(income[key], management_fee_percent)
            report_rows.append(ProjectPLRow(
                period=key,
                label=month_label(month),
                income=income[key],
                management_fee=fee,
                expense=expense[key],
                profit=income[key] - fee - expense[key],
            ))

        total = ProjectPLRow(
            period="TOTAL",
            label="Total",
            income=sum((r.income for r in report_rows), ZERO),
            management_fee=sum((r.management_fee for r in report_rows), ZERO),
            expense=sum((r.expense for r in report_rows), ZERO),
            profit=sum((r.profit for r in report_rows), ZERO),
        )
        return ProjectPLReport(
            company_id=company_id,
            project_id=project_id,
            fiscal_year=fiscal_year,
            management_fee_percent=management_fee_percent,
            rows=report_rows,
            total=total,
        )

    def drill_down(
        self,
        month: date,
        direction: DrillDownDirection,
        company_id: str = ALL_COMPANIES,
        project_id: str | None = None,
        category: str | None = None,
        statuses: list[EntryStatus] | None = None,
    ) -> list[DrillDownRow]:
        """The journal lines behind one month's income or expense figure."""
        first = date(month.year, month.month, 1)
        account_type = (
            AccountType.REVENUE if direction == DrillDownDirection.INCOME
            else AccountType.EXPENSE
        )
        query = self._line_query(
            company_id, project_id, statuses, first, month_end(first)
        ).where(LedgerAccount.account_type == account_type)
        if category:
            query = query.where(LedgerAccount.category == category)
        query = query.order_by(JournalEntry.entry_date, JournalEntry.reference_number, JournalEntryLine.line_order)

        return [
            DrillDownRow(
                entry_date=entry.entry_date,
                description=line.description or entry.description,
                reference_number=entry.reference_number,
                account_code=line.account_code,
                category=account.category or account.name,
                amount=signed_amount(account.account_type, line.entry_type, Decimal(line.amount)),
                attachments=[Attachment(**a) for a in entry.attachments or []],
            )
            for entry, line, account in self.db.execute(query).all()
        ]
