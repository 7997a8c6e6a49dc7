"""Business logic services."""

from charter_ledger.services.chart_of_accounts import ChartOfAccountsService
from charter_ledger.services.period_service import PeriodService
from charter_ledger.services.journal_service import JournalEntryService
from charter_ledger.services.posting_service import JournalPostingService
from charter_ledger.services.event_settings import EventSettingsService
from charter_ledger.services.bank_accounts import BankAccountService

__all__ = [
    "ChartOfAccountsService",
    "PeriodService",
    "JournalEntryService",
    "JournalPostingService",
    "EventSettingsService",
    "BankAccountService",
]
