"""
Tests for the journal entry lifecycle manager.

Tests cover:
- Reference numbering and its behaviour across deleted drafts
- Draft creation rules (minimum lines, accounts, balance)
- Posting and the immutability of posted entries
- Period-closed rejection
- Reference number conflicts and the single retry
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from charter_ledger.exceptions import (
    AlreadyPostedError,
    EntryNotFoundError,
    EntryValidationError,
    PeriodClosedError,
    ReferenceNumberConflictError,
    UnbalancedEntryError,
    UnknownAccountCodeError,
)
from charter_ledger.models.enums import EntryStatus, EntryType
from charter_ledger.models.journal_entry import (
    REFERENCE_CONSTRAINT,
    SOURCE_DOCUMENT_CONSTRAINT,
    JournalEntry,
    JournalEntryLine,
)
from charter_ledger.schemas.journal import JournalLineCreate, ManualEntryUpdate
from charter_ledger.services.chart_of_accounts import ChartOfAccountsService
from charter_ledger.services.journal_service import JournalEntryService, violated_constraint
from charter_ledger.services.period_service import PeriodService

YEAR = date.today().year
ENTRY_DATE = date(2025, 3, 10)


# --- Helpers ---

def line(code, entry_type, amount, **kwargs):
    return JournalLineCreate(
        account_code=code, entry_type=entry_type, amount=Decimal(amount), **kwargs
    )


def balanced_lines(amount="100.00"):
    return [
        line("6100", EntryType.DEBIT, amount, description="Rent"),
        line("1010", EntryType.CREDIT, amount, description="Bank"),
    ]


def create(service, lines=None, **kwargs):
    fields = dict(
        company_id="co-1",
        entry_date=ENTRY_DATE,
        description="Office rent",
        lines=lines or balanced_lines(),
        created_by="alice",
    )
    fields.update(kwargs)
    return service.create_entry(**fields)


def count_rows(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar()


# --- Creation ---

class TestCreateEntry:

    def test_create_draft(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        seeded_session.commit()

        assert entry.id is not None
        assert entry.status == EntryStatus.DRAFT
        assert entry.reference_number == f"JE-{YEAR}-0001"
        assert entry.total_debit == Decimal("100.00")
        assert entry.total_credit == Decimal("100.00")
        assert entry.is_auto_generated is False
        assert [l.line_order for l in entry.lines] == [1, 2]

    def test_lines_cache_account_name_and_currency(self, seeded_session):
        entry = create(JournalEntryService(seeded_session))
        assert entry.lines[0].account_name == "Office Rent"
        assert entry.lines[0].currency == "THB"

    def test_create_posted_sets_posted_fields(self, seeded_session):
        entry = create(JournalEntryService(seeded_session), status=EntryStatus.POSTED)
        assert entry.status == EntryStatus.POSTED
        assert entry.posted_by == "alice"
        assert entry.posted_at is not None

    def test_fewer_than_two_lines_rejected(self, seeded_session):
        service = JournalEntryService(seeded_session)
        with pytest.raises(EntryValidationError):
            create(service, lines=[line("6100", EntryType.DEBIT, "10")])
        assert count_rows(seeded_session, JournalEntry) == 0

    def test_unbalanced_rejected_when_balance_required(self, seeded_session):
        service = JournalEntryService(seeded_session)
        lines = [line("6100", EntryType.DEBIT, "100"), line("1010", EntryType.CREDIT, "90")]
        with pytest.raises(UnbalancedEntryError):
            create(service, lines=lines)

    def test_unbalanced_draft_allowed_when_balance_not_required(self, seeded_session):
        service = JournalEntryService(seeded_session)
        lines = [line("6100", EntryType.DEBIT, "100"), line("1010", EntryType.CREDIT, "90")]
        entry = create(service, lines=lines, require_balance=False)

        assert entry.total_debit == Decimal("100")
        assert entry.total_credit == Decimal("90")

    def test_unknown_account_rejected(self, seeded_session):
        service = JournalEntryService(seeded_session)
        lines = [line("9999", EntryType.DEBIT, "10"), line("1010", EntryType.CREDIT, "10")]
        with pytest.raises(UnknownAccountCodeError) as exc_info:
            create(service, lines=lines)
        assert exc_info.value.account_codes == ["9999"]
        assert count_rows(seeded_session, JournalEntryLine) == 0

    def test_inactive_account_rejected(self, seeded_session):
        ChartOfAccountsService(seeded_session).deactivate("6100")
        with pytest.raises(EntryValidationError):
            create(JournalEntryService(seeded_session))


class TestReferenceNumbers:

    def test_sequence_increments(self, seeded_session):
        service = JournalEntryService(seeded_session)
        refs = [create(service).reference_number for _ in range(3)]
        assert refs == [f"JE-{YEAR}-0001", f"JE-{YEAR}-0002", f"JE-{YEAR}-0003"]

    def test_sequence_is_per_company(self, seeded_session):
        service = JournalEntryService(seeded_session)
        create(service, company_id="co-1")
        entry = create(service, company_id="co-2")
        assert entry.reference_number == f"JE-{YEAR}-0001"

    def test_deleted_draft_number_not_reused(self, seeded_session):
        service = JournalEntryService(seeded_session)
        create(service)
        second = create(service)
        service.delete_entry(second.id)

        third = create(service)
        assert third.reference_number == f"JE-{YEAR}-0003"

    def test_conflict_is_retried_once(self, seeded_session, monkeypatch):
        service = JournalEntryService(seeded_session)
        create(service)
        seeded_session.commit()

        issued = iter([f"JE-{YEAR}-0001", f"JE-{YEAR}-0002"])
        monkeypatch.setattr(service.reference_numbers, "next_reference", lambda company_id: next(issued))

        entry = create(service)
        assert entry.reference_number == f"JE-{YEAR}-0002"
        assert count_rows(seeded_session, JournalEntry) == 2

    def test_second_conflict_is_fatal(self, seeded_session, monkeypatch):
        service = JournalEntryService(seeded_session)
        create(service)
        seeded_session.commit()

        monkeypatch.setattr(service.reference_numbers, "next_reference", lambda company_id: f"JE-{YEAR}-0001")

        with pytest.raises(ReferenceNumberConflictError) as exc_info:
            create(service)
        assert exc_info.value.retryable is True
        assert count_rows(seeded_session, JournalEntry) == 1
        assert count_rows(seeded_session, JournalEntryLine) == 2


class TestConstraintDetection:

    def integrity_error(self, orig):
        return IntegrityError("INSERT INTO journal_entries ...", {}, orig)

    def test_driver_constraint_name(self):
        orig = Exception("duplicate key")
        orig.diag = SimpleNamespace(constraint_name=SOURCE_DOCUMENT_CONSTRAINT)
        assert violated_constraint(self.integrity_error(orig)) == SOURCE_DOCUMENT_CONSTRAINT

    def test_constraint_name_in_message(self):
        orig = Exception(
            'duplicate key value violates unique constraint "uq_journal_entries_company_reference"'
        )
        assert violated_constraint(self.integrity_error(orig)) == REFERENCE_CONSTRAINT

    @pytest.mark.parametrize("message,expected", [
        ("UNIQUE constraint failed: journal_entries.company_id, journal_entries.reference_number",
         REFERENCE_CONSTRAINT),
        ("UNIQUE constraint failed: journal_entries.source_document_type, "
         "journal_entries.source_document_id", SOURCE_DOCUMENT_CONSTRAINT),
    ])
    def test_sqlite_column_list(self, message, expected):
        assert violated_constraint(self.integrity_error(Exception(message))) == expected

    def test_unrelated_violation(self):
        orig = Exception("NOT NULL constraint failed: journal_entries.reference_number")
        assert violated_constraint(self.integrity_error(orig)) is None

    def test_unrelated_violation_is_not_retried(self, db_session):
        service = JournalEntryService(db_session)
        error = self.integrity_error(Exception("FOREIGN KEY constraint failed"))

        with pytest.raises(IntegrityError):
            service._handle_conflict(error, 1, f"JE-{YEAR}-0001", None, None)


# --- Posting ---

class TestPostEntry:

    def test_post_draft(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        posted = service.post_entry(entry.id, "bob")

        assert posted.status == EntryStatus.POSTED
        assert posted.posted_by == "bob"
        assert posted.posted_at is not None

    def test_post_twice_rejected(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        service.post_entry(entry.id, "bob")

        with pytest.raises(AlreadyPostedError):
            service.post_entry(entry.id, "bob")

    def test_unbalanced_draft_cannot_be_posted(self, seeded_session):
        service = JournalEntryService(seeded_session)
        lines = [line("6100", EntryType.DEBIT, "100"), line("1010", EntryType.CREDIT, "90")]
        entry = create(service, lines=lines, require_balance=False)

        with pytest.raises(UnbalancedEntryError):
            service.post_entry(entry.id, "bob")
        assert entry.status == EntryStatus.DRAFT

    def test_one_sided_draft_cannot_be_posted(self, seeded_session):
        service = JournalEntryService(seeded_session)
        lines = [line("6100", EntryType.DEBIT, "100"), line("6200", EntryType.DEBIT, "50")]
        entry = create(service, lines=lines, require_balance=False)

        with pytest.raises(EntryValidationError):
            service.post_entry(entry.id, "bob")

    def test_missing_entry(self, seeded_session):
        with pytest.raises(EntryNotFoundError):
            JournalEntryService(seeded_session).post_entry(12345, "bob")


class TestPostedEntriesAreImmutable:

    def _posted(self, session):
        service = JournalEntryService(session)
        entry = create(service)
        service.post_entry(entry.id, "bob")
        session.commit()
        return service, entry

    def test_update_rejected_and_entry_unchanged(self, seeded_session):
        service, entry = self._posted(seeded_session)
        before = (entry.description, entry.total_debit, [(l.account_code, l.amount) for l in entry.lines])

        with pytest.raises(AlreadyPostedError):
            service.update_entry(entry.id, ManualEntryUpdate(
                description="Changed",
                lines=balanced_lines("999.00"),
            ))

        seeded_session.expire_all()
        reloaded = service.get_entry(entry.id)
        after = (reloaded.description, reloaded.total_debit, [(l.account_code, l.amount) for l in reloaded.lines])
        assert after == before

    def test_delete_rejected(self, seeded_session):
        service, entry = self._posted(seeded_session)
        with pytest.raises(AlreadyPostedError):
            service.delete_entry(entry.id)
        assert service.get_entry(entry.id).deleted_at is None


# --- Editing drafts ---

class TestUpdateEntry:

    def test_replacing_lines_recomputes_totals(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)

        updated = service.update_entry(entry.id, ManualEntryUpdate(
            lines=[
                line("6100", EntryType.DEBIT, "150"),
                line("6200", EntryType.DEBIT, "50"),
                line("1010", EntryType.CREDIT, "200"),
            ],
        ))
        seeded_session.commit()

        assert updated.total_debit == Decimal("200")
        assert updated.total_credit == Decimal("200")
        assert len(updated.lines) == 3
        assert count_rows(seeded_session, JournalEntryLine) == 3

    def test_update_description_only(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        updated = service.update_entry(entry.id, ManualEntryUpdate(description="Harbour rent"))

        assert updated.description == "Harbour rent"
        assert len(updated.lines) == 2

    def test_moving_into_closed_period_rejected(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        PeriodService(seeded_session).close_period("co-1", "2025-02", "carol")

        with pytest.raises(PeriodClosedError):
            service.update_entry(entry.id, ManualEntryUpdate(entry_date=date(2025, 2, 28)))


class TestDeleteEntry:

    def test_deleted_draft_is_hidden(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        service.delete_entry(entry.id)

        with pytest.raises(EntryNotFoundError):
            service.get_entry(entry.id)
        assert service.list_entries(company_id="co-1") == []

    def test_delete_releases_source_document(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service, source_document_type="expense", source_document_id="exp-1")
        service.delete_entry(entry.id)

        assert service.find_by_source("expense", "exp-1") is None


# --- Period guard ---

class TestClosedPeriod:

    def test_create_in_closed_period_rejected(self, seeded_session):
        PeriodService(seeded_session).close_period("co-1", "2025-03", "carol")
        seeded_session.commit()

        with pytest.raises(PeriodClosedError) as exc_info:
            create(JournalEntryService(seeded_session))
        assert exc_info.value.period == "2025-03"
        assert count_rows(seeded_session, JournalEntry) == 0
        assert count_rows(seeded_session, JournalEntryLine) == 0

    def test_other_company_unaffected(self, seeded_session):
        PeriodService(seeded_session).close_period("co-2", "2025-03", "carol")
        entry = create(JournalEntryService(seeded_session))
        assert entry.id is not None

    def test_post_into_closed_period_rejected(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service)
        PeriodService(seeded_session).close_period("co-1", "2025-03", "carol")

        with pytest.raises(PeriodClosedError):
            service.post_entry(entry.id, "bob")


class TestAccountBalance:

    def test_only_posted_lines_count(self, seeded_session):
        service = JournalEntryService(seeded_session)
        posted = create(service)
        service.post_entry(posted.id, "bob")
        create(service, lines=balanced_lines("40.00"))

        total_debit, total_credit, balance = service.get_account_balance("1010", "co-1")
        assert total_debit == Decimal("0")
        assert total_credit == Decimal("100.00")
        assert balance == Decimal("-100.00")

    def test_credit_normal_account(self, seeded_session):
        service = JournalEntryService(seeded_session)
        entry = create(service, lines=[
            line("1010", EntryType.DEBIT, "250"),
            line("4010", EntryType.CREDIT, "250"),
        ])
        service.post_entry(entry.id, "bob")

        _, _, balance = service.get_account_balance("4010")
        assert balance == Decimal("250")
