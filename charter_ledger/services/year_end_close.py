"""
Fiscal year-end close.

A year can be closed once every month in it is closed (or locked),
no live drafts are dated inside it and the trial balance at year
end balances. Closing then:

1. Posts one entry on the last day of the year that zeroes every
   revenue and expense account into retained earnings
2. Locks all twelve months

The closing entry is keyed on the company and fiscal year, so a
second close finds the first one instead of posting again.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from charter_ledger.exceptions import (
    DuplicateSourceDocumentError,
    EntryValidationError,
    YearEndNotReadyError,
)
from charter_ledger.models.enums import (
    AccountType,
    EntryStatus,
    EntryType,
    PeriodStatus,
    SourceDocumentType,
)
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.models.ledger_account import LedgerAccount
from charter_ledger.reports.periods import fiscal_months, month_end, month_key
from charter_ledger.reports.trial_balance import TrialBalanceService
from charter_ledger.schemas.year_end import PreCloseCheck, YearEndCloseResult
from charter_ledger.services import line_builder
from charter_ledger.services.journal_service import JournalEntryService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def year_end_source_id(company_id: str, fiscal_year: str) -> str:
    return f"{company_id}:{fiscal_year}"


class YearEndCloseService:

    def __init__(self, db: Session):
        self.db = db
        self.journal = JournalEntryService(db)
        self.periods = self.journal.periods
        self.trial_balance = TrialBalanceService(db)

    def run_pre_close_checks(self, company_id: str, fiscal_year: str) -> PreCloseCheck:
        months = self._months(fiscal_year)
        first_day, last_day = months[0], month_end(months[-1])

        open_periods = [
            month_key(m) for m in months
            if self.periods.get_status(company_id, month_key(m)) == PeriodStatus.OPEN
        ]
        draft_count = self.db.execute(
            select(func.count(JournalEntry.id)).where(
                JournalEntry.company_id == company_id,
                JournalEntry.status == EntryStatus.DRAFT,
                JournalEntry.deleted_at.is_(None),
                JournalEntry.entry_date >= first_day,
                JournalEntry.entry_date <= last_day,
            )
        ).scalar_one()
        report = self.trial_balance.build(company_id, last_day)

        return PreCloseCheck(
            company_id=company_id,
            fiscal_year=fiscal_year,
            open_periods=open_periods,
            draft_entry_count=draft_count,
            trial_balance_difference=abs(report.total_debit - report.total_credit),
            is_balanced=report.is_balanced,
            ready=not open_periods and not draft_count and report.is_balanced,
        )

    def close_year(self, company_id: str, fiscal_year: str, closed_by: str) -> YearEndCloseResult:
        """
        Post the closing entry and lock the year.

        Raises YearEndNotReadyError when the pre-close checks fail, and
        DuplicateSourceDocumentError when the year is already closed.
        """
        months = self._months(fiscal_year)
        last_day = month_end(months[-1])
        source_type = SourceDocumentType.YEAR_END_CLOSE.value
        source_id = year_end_source_id(company_id, fiscal_year)

        if self.journal.find_by_source(source_type, source_id) is not None:
            raise DuplicateSourceDocumentError(source_type, source_id)

        checks = self.run_pre_close_checks(company_id, fiscal_year)
        if not checks.ready:
            raise YearEndNotReadyError(company_id, fiscal_year, self._reasons(checks))

        revenue, expense = self._income_statement_balances(company_id, months[0], last_day)
        built = line_builder.build_year_end_close(fiscal_year, revenue, expense)
        net_income = sum(revenue.values(), ZERO) - sum(expense.values(), ZERO)

        entry = None
        if built.lines:
            entry = self.journal.create_entry(
                company_id=company_id,
                entry_date=last_day,
                description=built.description,
                lines=built.lines,
                created_by=closed_by,
                status=EntryStatus.POSTED,
                source_document_type=source_type,
                source_document_id=source_id,
                posted_by=closed_by,
                enforce_open_period=False,
            )

        periods_locked = []
        for month in months:
            period = month_key(month)
            self.periods.lock_period(
                company_id, period, closed_by, notes=f"Year-end close FY {fiscal_year}"
            )
            periods_locked.append(period)

        logger.info(
            "Closed fiscal year %s for company %s by %s: net income %s, entry %s",
            fiscal_year, company_id, closed_by, net_income,
            entry.reference_number if entry else None,
        )
        return YearEndCloseResult(
            success=True,
            journal_entry_id=entry.id if entry else None,
            reference_number=entry.reference_number if entry else None,
            status=entry.status if entry else None,
            fiscal_year=fiscal_year,
            net_income=net_income,
            revenue_accounts_closed=sum(1 for v in revenue.values() if v),
            expense_accounts_closed=sum(1 for v in expense.values() if v),
            periods_locked=periods_locked,
        )

    def _income_statement_balances(
        self, company_id: str, first_day: date, last_day: date
    ) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
        """Revenue balances credit-normal, expense balances debit-normal."""
        totals = self.db.execute(
            select(
                LedgerAccount.code,
                LedgerAccount.account_type,
                JournalEntryLine.entry_type,
                func.sum(JournalEntryLine.amount),
            )
            .join(JournalEntryLine, JournalEntryLine.account_code == LedgerAccount.code)
            .join(JournalEntry, JournalEntry.id == JournalEntryLine.journal_entry_id)
            .where(
                JournalEntry.company_id == company_id,
                JournalEntry.status == EntryStatus.POSTED,
                JournalEntry.deleted_at.is_(None),
                JournalEntry.entry_date >= first_day,
                JournalEntry.entry_date <= last_day,
                LedgerAccount.account_type.in_((AccountType.REVENUE, AccountType.EXPENSE)),
            )
            .group_by(LedgerAccount.code, LedgerAccount.account_type, JournalEntryLine.entry_type)
        ).all()

        revenue, expense = {}, {}
        for code, account_type, entry_type, amount in totals:
            amount = Decimal(amount)
            if account_type == AccountType.REVENUE:
                signed = amount if entry_type == EntryType.CREDIT else -amount
                revenue[code] = revenue.get(code, ZERO) + signed
            else:
                signed = amount if entry_type == EntryType.DEBIT else -amount
                expense[code] = expense.get(code, ZERO) + signed
        return revenue, expense

    @staticmethod
    def _months(fiscal_year: str) -> list[date]:
        try:
            return fiscal_months(fiscal_year)
        except ValueError as exc:
            raise EntryValidationError(str(exc)) from exc

    @staticmethod
    def _reasons(checks: PreCloseCheck) -> list[str]:
        reasons = []
        if checks.open_periods:
            reasons.append(f"open periods {', '.join(checks.open_periods)}")
        if checks.draft_entry_count:
            reasons.append(f"{checks.draft_entry_count} draft entries")
        if not checks.is_balanced:
            reasons.append(f"trial balance off by {checks.trial_balance_difference:.2f}")
        return reasons
