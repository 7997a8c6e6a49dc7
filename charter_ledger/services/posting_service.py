"""
Journal posting service: the public entry points.

Every method here returns a PostingResult instead of raising, so
callers can tell three outcomes apart:

- success, possibly skipped (already journalized, or the event
  type is disabled for the company): nothing more to do
- failure with a message to show (period closed, unbalanced,
  posted entry, invalid input)
- failure with error_code REFERENCE_NUMBER_CONFLICT: safe to retry

Unknown account codes and database failures are logged in full
and reported as "Posting failed".
"""

import logging
from datetime import date
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from charter_ledger.config import DefaultAccounts
from charter_ledger.exceptions import (
    DuplicateSourceDocumentError,
    LedgerError,
    UnbalancedEntryError,
    UnknownAccountCodeError,
)
from charter_ledger.models.enums import EntryStatus, EventType, SourceDocumentType
from charter_ledger.models.journal_entry import JournalEntry
from charter_ledger.schemas.events import (
    ExpenseApprovalData,
    ExpensePaymentData,
    GatewaySettlementData,
    OpeningBalanceData,
    ReceiptData,
    ReceiptPayment,
    RevenueRecognitionData,
)
from charter_ledger.schemas.journal import ManualEntryCreate, ManualEntryUpdate, PostingResult
from charter_ledger.services import line_builder
from charter_ledger.services.balance import calculate_totals, is_balanced
from charter_ledger.services.bank_accounts import BankAccountService
from charter_ledger.services.event_settings import EventSettingsService
from charter_ledger.services.journal_service import JournalEntryService
from charter_ledger.services.year_end_close import YearEndCloseService

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Posting failed"
POSTING_FAILED = "POSTING_FAILED"
EVENT_DISABLED = "EVENT_DISABLED"


def _entry_result(entry: JournalEntry, skipped: bool = False, error: str | None = None,
                  error_code: str | None = None) -> PostingResult:
    return PostingResult(
        success=True,
        journal_entry_id=entry.id,
        reference_number=entry.reference_number,
        status=entry.status,
        skipped=skipped,
        error=error,
        error_code=error_code,
    )


class JournalPostingService:

    def __init__(self, db: Session):
        self.db = db
        self.journal = JournalEntryService(db)
        self.event_settings = EventSettingsService(db)
        self.bank_accounts = BankAccountService(db)
        self.year_end = YearEndCloseService(db)

    # --- Business events ---

    def post_expense_approval(self, data: ExpenseApprovalData, created_by: str) -> PostingResult:
        """Dr expense lines and input VAT, Cr accounts payable."""
        def build():
            default_debit, _ = self.event_settings.get_default_accounts(
                data.company_id, EventType.EXPENSE_APPROVED
            )
            return line_builder.build_expense_approval(
                data, default_debit or DefaultAccounts.DEFAULT_EXPENSE
            )

        return self._post_event(
            EventType.EXPENSE_APPROVED, SourceDocumentType.EXPENSE, data.expense_id,
            data.company_id, data.expense_date, build, created_by,
        )

    def post_expense_payment(self, data: ExpensePaymentData, created_by: str) -> PostingResult:
        """Dr accounts payable, Cr the paying bank account."""
        def build():
            cash_account = (
                self.bank_accounts.resolve_gl_code(data.bank_account_id)
                or DefaultAccounts.DEFAULT_BANK
            )
            return line_builder.build_expense_payment(data, cash_account)

        return self._post_event(
            EventType.EXPENSE_PAID, SourceDocumentType.EXPENSE_PAYMENT, data.payment_id,
            data.company_id, data.payment_date, build, created_by,
        )

    def post_receipt(self, data: ReceiptData, created_by: str) -> PostingResult:
        """Dr cash received, Cr revenue net of VAT, Cr output VAT."""
        def build():
            _, default_credit = self.event_settings.get_default_accounts(
                data.company_id, EventType.RECEIPT_RECEIVED
            )
            return line_builder.build_receipt(
                data,
                self._receipt_payment_account,
                default_credit or DefaultAccounts.DEFAULT_REVENUE,
            )

        return self._post_event(
            EventType.RECEIPT_RECEIVED, SourceDocumentType.RECEIPT, data.receipt_id,
            data.company_id, data.receipt_date, build, created_by,
        )

    def post_gateway_settlement(self, data: GatewaySettlementData, created_by: str) -> PostingResult:
        """Dr bank net, Dr fee and fee VAT, Cr card receivable gross."""
        def build():
            bank_account = (
                self.bank_accounts.resolve_gl_code(data.bank_account_id)
                or DefaultAccounts.DEFAULT_BANK
            )
            return line_builder.build_gateway_settlement(data, bank_account)

        return self._post_event(
            EventType.GATEWAY_SETTLEMENT, SourceDocumentType.GATEWAY_SETTLEMENT,
            data.settlement_id, data.company_id, data.settlement_date, build, created_by,
        )

    def post_revenue_recognition(self, data: RevenueRecognitionData, created_by: str) -> PostingResult:
        """Dr charter deposits received, Cr revenue."""
        def build():
            _, default_credit = self.event_settings.get_default_accounts(
                data.company_id, EventType.REVENUE_RECOGNIZED
            )
            revenue_account = (
                data.revenue_account or default_credit or DefaultAccounts.DEFAULT_REVENUE
            )
            return line_builder.build_revenue_recognition(data, revenue_account)

        return self._post_event(
            EventType.REVENUE_RECOGNIZED, SourceDocumentType.REVENUE_RECOGNITION,
            data.recognition_id, data.company_id, data.recognition_date, build, created_by,
        )

    def post_opening_balance(self, data: OpeningBalanceData, created_by: str) -> PostingResult:
        """One entry per company and fiscal year carrying the balances in."""
        return self._post_event(
            EventType.OPENING_BALANCE, SourceDocumentType.OPENING_BALANCE, data.source_id,
            data.company_id, data.entry_date,
            lambda: line_builder.build_opening_balance(data), created_by,
        )

    # --- Year end ---

    def close_fiscal_year(self, company_id: str, fiscal_year: str, closed_by: str) -> PostingResult:
        """
        Close revenue and expense into retained earnings and lock the year.

        Succeeds with a YearEndCloseResult. Closing a year twice is
        skipped with the first closing entry.
        """
        return self._run(lambda: self.year_end.close_year(company_id, fiscal_year, closed_by))

    # --- Manual entries ---

    def create_manual_entry(self, request: ManualEntryCreate, created_by: str) -> PostingResult:
        """Save a manual entry as a draft. Balance is checked when it is posted."""
        return self._run(lambda: self.journal.create_entry(
            company_id=request.company_id,
            entry_date=request.entry_date,
            description=request.description,
            lines=request.lines,
            created_by=created_by,
            status=EntryStatus.DRAFT,
            require_balance=False,
            attachments=request.attachments,
        ))

    def update_manual_entry(self, entry_id: int, request: ManualEntryUpdate) -> PostingResult:
        return self._run(lambda: self.journal.update_entry(entry_id, request))

    def post_entry(self, entry_id: int, posted_by: str) -> PostingResult:
        return self._run(lambda: self.journal.post_entry(entry_id, posted_by))

    def delete_entry(self, entry_id: int) -> PostingResult:
        return self._run(lambda: self.journal.delete_entry(entry_id))

    # --- Internals ---

    def _receipt_payment_account(self, payment: ReceiptPayment) -> str:
        if line_builder.is_gateway_payment(payment):
            return DefaultAccounts.CREDIT_CARD_RECEIVABLE
        if not payment.bank_account_id:
            return DefaultAccounts.CASH
        return (
            self.bank_accounts.resolve_gl_code(payment.bank_account_id)
            or DefaultAccounts.DEFAULT_BANK
        )

    def _post_event(
        self,
        event_type: EventType,
        source_type: SourceDocumentType,
        source_id: str,
        company_id: str,
        entry_date: date,
        build: Callable[[], line_builder.BuiltEntry],
        created_by: str,
    ) -> PostingResult:
        if not self.event_settings.is_event_enabled(company_id, event_type):
            logger.info(
                "Journal posting disabled for %s at company %s, skipping %s %s",
                event_type.value, company_id, source_type.value, source_id,
            )
            return PostingResult(
                success=True, skipped=True,
                error=f"Journal posting is disabled for {event_type.value}",
                error_code=EVENT_DISABLED,
            )

        existing = self.journal.find_by_source(source_type.value, source_id)
        if existing is not None:
            return self._duplicate_result(source_type.value, source_id, existing)

        def create() -> JournalEntry:
            built = build()
            if not is_balanced(built.lines):
                total_debit, total_credit = calculate_totals(built.lines)
                logger.warning(
                    "Builder for %s %s produced unbalanced lines: debit=%s credit=%s",
                    source_type.value, source_id, total_debit, total_credit,
                )
                raise UnbalancedEntryError(total_debit, total_credit)

            auto_post = self.event_settings.should_auto_post(company_id, event_type)
            return self.journal.create_entry(
                company_id=company_id,
                entry_date=entry_date,
                description=built.description,
                lines=built.lines,
                created_by=created_by,
                status=EntryStatus.POSTED if auto_post else EntryStatus.DRAFT,
                source_document_type=source_type.value,
                source_document_id=source_id,
            )

        return self._run(create)

    def _duplicate_result(self, source_type: str, source_id: str,
                          existing: JournalEntry | None) -> PostingResult:
        logger.info("Journal entry already exists for %s %s", source_type, source_id)
        message = f"Journal entry already exists for {source_type} {source_id}"
        if existing is None:
            return PostingResult(
                success=True, skipped=True, error=message,
                error_code=DuplicateSourceDocumentError.code,
            )
        return _entry_result(
            existing, skipped=True, error=message,
            error_code=DuplicateSourceDocumentError.code,
        )

    def _run(self, operation: Callable[[], JournalEntry | PostingResult]) -> PostingResult:
        try:
            outcome = operation()
        except DuplicateSourceDocumentError as exc:
            existing = self.journal.find_by_source(exc.source_type, exc.source_id)
            return self._duplicate_result(exc.source_type, exc.source_id, existing)
        except UnknownAccountCodeError as exc:
            logger.exception("Journal posting reached persistence with %s", exc.message)
            return PostingResult(success=False, error=GENERIC_FAILURE, error_code=exc.code)
        except LedgerError as exc:
            return PostingResult(success=False, error=exc.message, error_code=exc.code)
        except SQLAlchemyError:
            logger.exception("Unexpected database failure while posting journal entry")
            return PostingResult(success=False, error=GENERIC_FAILURE, error_code=POSTING_FAILED)
        if isinstance(outcome, PostingResult):
            return outcome
        return _entry_result(outcome)
