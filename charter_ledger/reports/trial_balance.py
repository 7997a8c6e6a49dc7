"""Trial balance from posted entries up to a date."""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from charter_ledger.config import get_settings
from charter_ledger.models.enums import EntryStatus, EntryType
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.models.ledger_account import LedgerAccount
from charter_ledger.schemas.reports import TrialBalanceReport, TrialBalanceRow

ZERO = Decimal("0")


class TrialBalanceService:

    def __init__(self, db: Session):
        self.db = db

    def build(self, company_id: str, as_of_date: date) -> TrialBalanceReport:
        totals = self.db.execute(
            select(
                LedgerAccount,
                JournalEntryLine.entry_type,
                func.sum(JournalEntryLine.amount),
            )
            .join(JournalEntryLine, JournalEntryLine.account_code == LedgerAccount.code)
            .join(JournalEntry, JournalEntry.id == JournalEntryLine.journal_entry_id)
            .where(
                JournalEntry.company_id == company_id,
                JournalEntry.status == EntryStatus.POSTED,
                JournalEntry.deleted_at.is_(None),
                JournalEntry.entry_date <= as_of_date,
            )
            .group_by(LedgerAccount.id, JournalEntryLine.entry_type)
        ).all()

        by_account = {}
        for account, entry_type, amount in totals:
            debit, credit = by_account.get(account.code, (account, ZERO, ZERO))[1:]
            if entry_type == EntryType.DEBIT:
                debit += Decimal(amount)
            else:
                credit += Decimal(amount)
            by_account[account.code] = (account, debit, credit)

        rows = []
        for code in sorted(by_account):
            account, debit, credit = by_account[code]
            net = debit - credit
            if net == 0:
                continue
            rows.append(TrialBalanceRow(
                account_code=code,
                account_name=account.name,
                account_type=account.account_type,
                debit=net if net > 0 else ZERO,
                credit=-net if net < 0 else ZERO,
            ))

        total_debit = sum((r.debit for r in rows), ZERO)
        total_credit = sum((r.credit for r in rows), ZERO)
        return TrialBalanceReport(
            company_id=company_id,
            as_of_date=as_of_date,
            rows=rows,
            total_debit=total_debit,
            total_credit=total_credit,
            is_balanced=abs(total_debit - total_credit) < get_settings().BALANCE_TOLERANCE,
        )
