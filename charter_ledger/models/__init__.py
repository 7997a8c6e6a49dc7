"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from charter_ledger.models.base import Base
from charter_ledger.models.enums import (
    AccountType,
    NormalBalance,
    EntryType,
    EntryStatus,
    PeriodStatus,
    SourceDocumentType,
    EventType,
)
from charter_ledger.models.ledger_account import LedgerAccount
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.models.financial_period import FinancialPeriod
from charter_ledger.models.bank_account import BankAccount
from charter_ledger.models.journal_event_setting import JournalEventSetting

__all__ = [
    "Base",
    "AccountType",
    "NormalBalance",
    "EntryType",
    "EntryStatus",
    "PeriodStatus",
    "SourceDocumentType",
    "EventType",
    "LedgerAccount",
    "JournalEntry",
    "JournalEntryLine",
    "FinancialPeriod",
    "BankAccount",
    "JournalEventSetting",
]
