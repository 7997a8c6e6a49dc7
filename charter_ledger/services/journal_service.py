"""
Journal entry lifecycle manager.

This service enforces the ledger rules for every write:
1. An entry has at least two lines with positive amounts
2. Debits equal credits (drafts saved by hand are exempt until posted)
3. Every line points at an existing, active account
4. The period of the entry date is open
5. A source document is journalized at most once
6. Posted entries are immutable

    draft --post--> posted
    draft --update--> draft
    draft --delete--> (removed)

Entry and lines are written inside a SAVEPOINT so a failed insert
leaves nothing behind. The service flushes but never commits; the
caller owns the outer transaction.
"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from charter_ledger.config import get_settings
from charter_ledger.exceptions import (
    AlreadyPostedError,
    DuplicateSourceDocumentError,
    EntryNotFoundError,
    EntryValidationError,
    ReferenceNumberConflictError,
    UnknownAccountCodeError,
)
from charter_ledger.models.enums import AccountType, EntryStatus, EntryType
from charter_ledger.models.journal_entry import (
    REFERENCE_CONSTRAINT,
    SOURCE_DOCUMENT_CONSTRAINT,
    JournalEntry,
    JournalEntryLine,
)
from charter_ledger.schemas.journal import ManualEntryUpdate
from charter_ledger.services.balance import assert_balanced, calculate_totals
from charter_ledger.services.chart_of_accounts import ChartOfAccountsService
from charter_ledger.services.duplicate_guard import DuplicateGuard
from charter_ledger.services.period_service import PeriodService
from charter_ledger.services.reference_numbers import ReferenceNumberGenerator

logger = logging.getLogger(__name__)

MIN_LINES = 2
MAX_INSERT_ATTEMPTS = 2

# SQLite names the constrained columns instead of the constraint.
SQLITE_CONSTRAINT_COLUMNS = {
    "journal_entries.company_id, journal_entries.reference_number": REFERENCE_CONSTRAINT,
    "journal_entries.source_document_type, journal_entries.source_document_id":
        SOURCE_DOCUMENT_CONSTRAINT,
}


def violated_constraint(exc: IntegrityError) -> str | None:
    """Name of the unique constraint behind an IntegrityError, if it is one of ours."""
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name

    detail = str(exc.orig)
    for name in (REFERENCE_CONSTRAINT, SOURCE_DOCUMENT_CONSTRAINT):
        if name in detail:
            return name
    for columns, name in SQLITE_CONSTRAINT_COLUMNS.items():
        if detail.rstrip().endswith(columns):
            return name
    return None


class JournalEntryService:
    """
    All journal writes pass through this service.

    Errors are raised as LedgerError subclasses. JournalPostingService
    turns them into PostingResult values for outside callers.
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = ChartOfAccountsService(db)
        self.periods = PeriodService(db)
        self.duplicates = DuplicateGuard(db)
        self.reference_numbers = ReferenceNumberGenerator(db)

    # --- Writes ---

    def create_entry(
        self,
        *,
        company_id: str,
        entry_date: date,
        description: str,
        lines: list,
        created_by: str,
        status: EntryStatus = EntryStatus.DRAFT,
        require_balance: bool = True,
        attachments: list | None = None,
        source_document_type: str | None = None,
        source_document_id: str | None = None,
        posted_by: str | None = None,
        enforce_open_period: bool = True,
    ) -> JournalEntry:
        """
        Validate and persist a new entry with its lines.

        Checks run in order: line count and amounts, balance, period,
        duplicate source document, account codes. Nothing is written
        unless all of them pass. A posted entry is always balanced,
        whatever require_balance says.

        enforce_open_period=False is reserved for the year-end closing
        entry, which lands in a month that is already closed.
        """
        self._validate_lines(lines)
        if require_balance or status == EntryStatus.POSTED:
            total_debit, total_credit = assert_balanced(lines)
        else:
            total_debit, total_credit = calculate_totals(lines)

        if enforce_open_period:
            self.periods.assert_open(company_id, entry_date)

        if source_document_type and self.duplicates.exists(
            source_document_type, source_document_id
        ):
            raise DuplicateSourceDocumentError(source_document_type, source_document_id)

        accounts = self._resolve_accounts(lines)
        now = datetime.utcnow()

        for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
            reference_number = self.reference_numbers.next_reference(company_id)
            entry = JournalEntry(
                reference_number=reference_number,
                entry_date=entry_date,
                company_id=company_id,
                description=description,
                status=status,
                total_debit=total_debit,
                total_credit=total_credit,
                created_by=created_by,
                created_at=now,
                updated_at=now,
                attachments=self._dump_attachments(attachments),
                source_document_type=source_document_type,
                source_document_id=source_document_id,
                is_auto_generated=source_document_type is not None,
                lines=self._build_lines(lines, accounts),
            )
            if status == EntryStatus.POSTED:
                entry.posted_by = posted_by or created_by
                entry.posted_at = now

            try:
                with self.db.begin_nested():
                    self.db.add(entry)
                    self.db.flush()
            except IntegrityError as exc:
                self._handle_conflict(
                    exc, attempt, reference_number,
                    source_document_type, source_document_id,
                )
                continue

            logger.info(
                "Created journal entry %s for company %s (%s, source=%s:%s)",
                entry.reference_number, company_id, status.value,
                source_document_type, source_document_id,
            )
            return entry

    def post_entry(self, entry_id: int, posted_by: str) -> JournalEntry:
        """
        Move a draft to posted.

        The status check and the status update happen on a row
        locked in the current transaction, so a concurrent post of
        the same entry fails with AlreadyPostedError.
        """
        entry = self._get_for_update(entry_id)
        if entry.is_posted:
            raise AlreadyPostedError(entry.id, entry.reference_number)

        self._validate_lines(entry.lines)
        sides = {line.entry_type for line in entry.lines}
        if sides != {EntryType.DEBIT, EntryType.CREDIT}:
            raise EntryValidationError(
                "Journal entry must contain at least one debit and one credit"
            )
        total_debit, total_credit = assert_balanced(entry.lines)
        self.periods.assert_open(entry.company_id, entry.entry_date)

        entry.status = EntryStatus.POSTED
        entry.total_debit = total_debit
        entry.total_credit = total_credit
        entry.posted_by = posted_by
        entry.posted_at = datetime.utcnow()
        self.db.flush()
        logger.info("Posted journal entry %s by %s", entry.reference_number, posted_by)
        return entry

    def update_entry(self, entry_id: int, changes: ManualEntryUpdate) -> JournalEntry:
        """Edit a draft. Cached totals are recomputed when lines change."""
        entry = self._get_for_update(entry_id)
        if entry.is_posted:
            raise AlreadyPostedError(entry.id, entry.reference_number)

        self.periods.assert_open(entry.company_id, entry.entry_date)
        if changes.entry_date is not None and changes.entry_date != entry.entry_date:
            self.periods.assert_open(entry.company_id, changes.entry_date)

        accounts = None
        if changes.lines is not None:
            self._validate_lines(changes.lines)
            accounts = self._resolve_accounts(changes.lines)

        with self.db.begin_nested():
            if changes.entry_date is not None:
                entry.entry_date = changes.entry_date
            if changes.description is not None:
                entry.description = changes.description
            if changes.attachments is not None:
                entry.attachments = self._dump_attachments(changes.attachments)
            if changes.lines is not None:
                entry.lines = self._build_lines(changes.lines, accounts)
                entry.total_debit, entry.total_credit = calculate_totals(changes.lines)
            entry.updated_at = datetime.utcnow()
            self.db.flush()
        return entry

    def delete_entry(self, entry_id: int) -> JournalEntry:
        """
        Delete a draft.

        The row is kept with deleted_at set so its reference number
        stays taken. The source document link is released, so the
        business event can be journalized again.
        """
        entry = self._get_for_update(entry_id)
        if entry.is_posted:
            raise AlreadyPostedError(entry.id, entry.reference_number)

        entry.deleted_at = datetime.utcnow()
        entry.source_document_type = None
        entry.source_document_id = None
        self.db.flush()
        logger.info("Deleted draft journal entry %s", entry.reference_number)
        return entry

    # --- Reads ---

    def get_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.execute(
            select(JournalEntry).where(
                JournalEntry.id == entry_id,
                JournalEntry.deleted_at.is_(None),
            )
        ).scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def find_by_source(self, source_type: str, source_id: str) -> JournalEntry | None:
        return self.duplicates.find(source_type, source_id)

    def list_entries(
        self,
        company_id: str | None = None,
        status: EntryStatus | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        source_document_type: str | None = None,
    ) -> list[JournalEntry]:
        """Return live entries matching the filters, newest first."""
        query = select(JournalEntry).where(JournalEntry.deleted_at.is_(None))
        if company_id:
            query = query.where(JournalEntry.company_id == company_id)
        if status:
            query = query.where(JournalEntry.status == status)
        if date_from:
            query = query.where(JournalEntry.entry_date >= date_from)
        if date_to:
            query = query.where(JournalEntry.entry_date <= date_to)
        if source_document_type:
            query = query.where(JournalEntry.source_document_type == source_document_type)
        entries = self.db.execute(
            query.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc())
        ).scalars().all()
        return list(entries)

    def get_account_balance(
        self, account_code: str, company_id: str | None = None, as_of: date | None = None
    ) -> tuple[Decimal, Decimal, Decimal]:
        """
        Calculate an account's balance from posted lines.

        Returns (total_debit, total_credit, balance). Balance is on the
        account's normal side: debits minus credits for assets and
        expenses, credits minus debits otherwise.
        """
        account = self.accounts.get_by_code(account_code)

        totals = {}
        for entry_type in (EntryType.DEBIT, EntryType.CREDIT):
            query = (
                select(func.coalesce(func.sum(JournalEntryLine.amount), 0))
                .join(JournalEntry)
                .where(
                    JournalEntryLine.account_code == account_code,
                    JournalEntryLine.entry_type == entry_type,
                    JournalEntry.status == EntryStatus.POSTED,
                    JournalEntry.deleted_at.is_(None),
                )
            )
            if company_id:
                query = query.where(JournalEntry.company_id == company_id)
            if as_of:
                query = query.where(JournalEntry.entry_date <= as_of)
            totals[entry_type] = Decimal(str(self.db.execute(query).scalar()))

        total_debit, total_credit = totals[EntryType.DEBIT], totals[EntryType.CREDIT]
        if account.account_type in (AccountType.ASSET, AccountType.EXPENSE):
            return total_debit, total_credit, total_debit - total_credit
        return total_debit, total_credit, total_credit - total_debit

    # --- Helpers ---

    def _get_for_update(self, entry_id: int) -> JournalEntry:
        entry = self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.id == entry_id, JournalEntry.deleted_at.is_(None))
            .with_for_update()
        ).scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def _validate_lines(self, lines) -> None:
        if len(lines) < MIN_LINES:
            raise EntryValidationError(
                f"Journal entry must have at least {MIN_LINES} lines"
            )
        for line in lines:
            if line.amount is None or line.amount <= 0:
                raise EntryValidationError(
                    f"Line amount for account {line.account_code} must be positive"
                )

    def _resolve_accounts(self, lines) -> dict:
        codes = {line.account_code for line in lines}
        accounts = self.accounts.find_many(codes)
        missing = codes - set(accounts)
        if missing:
            raise UnknownAccountCodeError(list(missing))
        for account in accounts.values():
            if not account.is_active:
                raise EntryValidationError(f"Account {account.code} is not active")
        return accounts

    def _build_lines(self, lines, accounts) -> list[JournalEntryLine]:
        base_currency = get_settings().BASE_CURRENCY
        return [
            JournalEntryLine(
                line_order=index,
                account_code=line.account_code,
                account_name=accounts[line.account_code].name,
                description=line.description or "",
                entry_type=line.entry_type,
                amount=line.amount,
                currency=line.currency or base_currency,
                project_id=line.project_id,
            )
            for index, line in enumerate(lines, start=1)
        ]

    @staticmethod
    def _dump_attachments(attachments) -> list | None:
        if attachments is None:
            return None
        return [
            a.model_dump() if hasattr(a, "model_dump") else dict(a)
            for a in attachments
        ]

    def _handle_conflict(
        self, exc: IntegrityError, attempt: int, reference_number: str,
        source_type: str | None, source_id: str | None,
    ) -> None:
        """Translate a unique-constraint violation, or return to retry."""
        constraint = violated_constraint(exc)
        if constraint == SOURCE_DOCUMENT_CONSTRAINT:
            raise DuplicateSourceDocumentError(source_type, source_id) from exc
        if constraint != REFERENCE_CONSTRAINT:
            raise exc
        if attempt >= MAX_INSERT_ATTEMPTS:
            logger.error(
                "Reference number %s still conflicts after %d attempts",
                reference_number, attempt,
            )
            raise ReferenceNumberConflictError(reference_number) from exc
        logger.warning(
            "Reference number %s already taken, retrying with a new number",
            reference_number,
        )
