"""
Tests for JournalPostingService, the public posting entry points.

Every call returns a PostingResult, so these tests assert on
results and on what ended up in the database.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from charter_ledger.models.enums import EntryStatus, EntryType, EventType
from charter_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from charter_ledger.schemas.events import (
    ExpenseApprovalData,
    ExpenseLineItem,
    ExpensePaymentData,
    GatewaySettlementData,
    OpeningBalanceData,
    OpeningBalanceLine,
    ReceiptData,
    ReceiptLineItem,
    ReceiptPayment,
    RevenueRecognitionData,
)
from charter_ledger.schemas.journal import JournalLineCreate, ManualEntryCreate, ManualEntryUpdate
from charter_ledger.schemas.settings import BankAccountCreate, EventSettingUpdate
from charter_ledger.services.bank_accounts import BankAccountService
from charter_ledger.services.event_settings import EventSettingsService
from charter_ledger.services.journal_service import JournalEntryService
from charter_ledger.services.period_service import PeriodService
from charter_ledger.services.posting_service import JournalPostingService


# --- Helpers ---

def expense(expense_id="exp-1", account_code="5000", company_id="co-1"):
    return ExpenseApprovalData(
        expense_id=expense_id,
        company_id=company_id,
        expense_number="EXP-0001",
        expense_date=date(2025, 3, 10),
        vendor_name="Marina Fuel Co",
        line_items=[ExpenseLineItem(description="Fuel", account_code=account_code,
                                    amount=Decimal("500.00"))],
        total_subtotal=Decimal("500.00"),
        total_vat_amount=Decimal("35.00"),
        total_amount=Decimal("535.00"),
    )


def receipt(payments, receipt_id="rcp-1"):
    return ReceiptData(
        receipt_id=receipt_id,
        company_id="co-1",
        receipt_number="RE-0001",
        receipt_date=date(2025, 3, 11),
        client_name="Jane Guest",
        line_items=[
            ReceiptLineItem(description="Day charter", account_code="4010", amount=Decimal("700")),
            ReceiptLineItem(description="Drinks", account_code="4100", amount=Decimal("370")),
        ],
        total_subtotal=Decimal("1000.00"),
        total_vat_amount=Decimal("70.00"),
        total_amount=Decimal("1070.00"),
        payments=payments,
    )


def entries(db):
    return db.execute(select(JournalEntry)).scalars().all()


def line_count(db):
    return db.execute(select(func.count()).select_from(JournalEntryLine)).scalar()


def debit_accounts(entry):
    return [l.account_code for l in entry.lines if l.entry_type == EntryType.DEBIT]


# --- Business events ---

class TestExpenseApproval:

    def test_creates_draft_by_default(self, seeded_session):
        result = JournalPostingService(seeded_session).post_expense_approval(expense(), "alice")

        assert result.success is True
        assert result.skipped is False
        assert result.status == EntryStatus.DRAFT
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert entry.source_document_type == "expense"
        assert entry.source_document_id == "exp-1"
        assert entry.is_auto_generated is True
        assert len(entry.lines) == 3

    def test_same_expense_twice_creates_one_entry(self, seeded_session):
        service = JournalPostingService(seeded_session)
        first = service.post_expense_approval(expense(), "alice")
        second = service.post_expense_approval(expense(), "alice")

        assert second.success is True
        assert second.skipped is True
        assert second.error_code == "DUPLICATE_SOURCE_DOCUMENT"
        assert second.journal_entry_id == first.journal_entry_id
        assert len(entries(seeded_session)) == 1
        assert line_count(seeded_session) == 3

    def test_concurrent_duplicate_caught_by_unique_constraint(self, seeded_session, monkeypatch):
        service = JournalPostingService(seeded_session)
        first = service.post_expense_approval(expense(), "alice")

        # Another request committed the same expense after this one checked.
        find_by_source = service.journal.find_by_source
        calls = []

        def missed_first_lookup(*args):
            calls.append(args)
            return None if len(calls) == 1 else find_by_source(*args)

        monkeypatch.setattr(service.journal, "find_by_source", missed_first_lookup)
        monkeypatch.setattr(service.journal.duplicates, "exists", lambda *args: False)

        second = service.post_expense_approval(expense(), "alice")

        assert second.success is True
        assert second.skipped is True
        assert second.error_code == "DUPLICATE_SOURCE_DOCUMENT"
        assert second.journal_entry_id == first.journal_entry_id
        assert len(entries(seeded_session)) == 1
        assert line_count(seeded_session) == 3

    def test_auto_post_setting(self, seeded_session):
        EventSettingsService(seeded_session).upsert(
            "co-1", EventType.EXPENSE_APPROVED, EventSettingUpdate(auto_post=True)
        )
        result = JournalPostingService(seeded_session).post_expense_approval(expense(), "alice")

        assert result.status == EntryStatus.POSTED
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert entry.posted_by == "alice"

    def test_disabled_event_is_skipped(self, seeded_session):
        EventSettingsService(seeded_session).upsert(
            "co-1", EventType.EXPENSE_APPROVED, EventSettingUpdate(is_enabled=False)
        )
        result = JournalPostingService(seeded_session).post_expense_approval(expense(), "alice")

        assert result.success is True
        assert result.skipped is True
        assert result.journal_entry_id is None
        assert entries(seeded_session) == []

    def test_default_debit_override_for_unmapped_lines(self, seeded_session):
        EventSettingsService(seeded_session).upsert(
            "co-1", EventType.EXPENSE_APPROVED,
            EventSettingUpdate(default_debit_account="6100"),
        )
        result = JournalPostingService(seeded_session).post_expense_approval(
            expense(account_code=None), "alice"
        )
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert debit_accounts(entry) == ["6100", "1170"]

    def test_closed_period_fails_without_writing(self, seeded_session):
        PeriodService(seeded_session).close_period("co-1", "2025-03", "carol")
        result = JournalPostingService(seeded_session).post_expense_approval(expense(), "alice")

        assert result.success is False
        assert result.error_code == "PERIOD_CLOSED"
        assert "2025-03" in result.error
        assert entries(seeded_session) == []
        assert line_count(seeded_session) == 0

    def test_unknown_account_reported_generically(self, seeded_session):
        result = JournalPostingService(seeded_session).post_expense_approval(
            expense(account_code="9999"), "alice"
        )

        assert result.success is False
        assert result.error == "Posting failed"
        assert result.error_code == "UNKNOWN_ACCOUNT_CODE"
        assert entries(seeded_session) == []

    def test_unbalanced_payload_reports_totals(self, seeded_session):
        data = expense()
        data.total_amount = Decimal("600.00")
        result = JournalPostingService(seeded_session).post_expense_approval(data, "alice")

        assert result.success is False
        assert result.error_code == "UNBALANCED"
        assert "debit=535.00, credit=600.00" in result.error


class TestExpensePayment:

    def _payment(self, bank_account_id):
        return ExpensePaymentData(
            expense_id="exp-1", payment_id="pay-1", company_id="co-1",
            expense_number="EXP-0001", payment_date=date(2025, 3, 12),
            vendor_name="Marina Fuel Co", payment_amount=Decimal("535.00"),
            bank_account_id=bank_account_id,
        )

    def test_credits_bank_gl_code(self, seeded_session):
        BankAccountService(seeded_session).create(BankAccountCreate(
            id="bank-eur", company_id="co-1", name="EUR account",
            currency="EUR", gl_account_code="1011",
        ))
        result = JournalPostingService(seeded_session).post_expense_payment(
            self._payment("bank-eur"), "alice"
        )
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert [(l.account_code, l.entry_type) for l in entry.lines] == [
            ("2050", EntryType.DEBIT),
            ("1011", EntryType.CREDIT),
        ]

    def test_unmapped_bank_falls_back_to_default_bank(self, seeded_session):
        result = JournalPostingService(seeded_session).post_expense_payment(
            self._payment("no-such-bank"), "alice"
        )
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert entry.lines[1].account_code == "1010"


class TestReceipt:

    def test_vat_inclusive_receipt(self, seeded_session):
        result = JournalPostingService(seeded_session).post_receipt(
            receipt([ReceiptPayment(amount=Decimal("1070.00"))]), "alice"
        )
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)

        credits = [(l.account_code, l.amount) for l in entry.lines if l.entry_type == EntryType.CREDIT]
        assert credits == [
            ("4010", Decimal("654.21")),
            ("4100", Decimal("345.79")),
            ("2200", Decimal("70.00")),
        ]
        assert entry.total_debit == entry.total_credit == Decimal("1070.00")

    def test_payment_account_resolution(self, seeded_session):
        BankAccountService(seeded_session).create(BankAccountCreate(
            id="bank-usd", company_id="co-1", name="USD account",
            currency="USD", gl_account_code="1012",
        ))
        BankAccountService(seeded_session).create(BankAccountCreate(
            id="bank-unmapped", company_id="co-1", name="New account", currency="THB",
        ))
        payments = [
            ReceiptPayment(amount=Decimal("100")),
            ReceiptPayment(amount=Decimal("200"), bank_account_id="bank-usd"),
            ReceiptPayment(amount=Decimal("300"), bank_account_id="bank-unmapped"),
            ReceiptPayment(amount=Decimal("470"), payment_method="beam", bank_account_id="bank-usd"),
        ]
        result = JournalPostingService(seeded_session).post_receipt(receipt(payments), "alice")
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)

        assert debit_accounts(entry) == ["1000", "1012", "1010", "1140"]


class TestGatewaySettlement:

    def test_settlement_entry(self, seeded_session):
        data = GatewaySettlementData(
            settlement_id="set-1", company_id="co-1", settlement_date=date(2025, 3, 15),
            gross_amount=Decimal("1070.00"), fee_amount=Decimal("32.10"),
            fee_vat_amount=Decimal("2.10"),
        )
        result = JournalPostingService(seeded_session).post_gateway_settlement(data, "alice")
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)

        assert result.success is True
        assert entry.source_document_type == "gateway_settlement"
        assert debit_accounts(entry) == ["1010", "6710", "1170"]
        assert entry.total_credit == Decimal("1070.00")


class TestCharterDeposits:

    def test_deposit_then_recognition(self, seeded_session):
        service = JournalPostingService(seeded_session)
        deposit = receipt([ReceiptPayment(amount=Decimal("1070.00"))]).model_copy(
            update={"charter_date_to": date(2025, 4, 20)}
        )
        held = service.post_receipt(deposit, "alice")
        released = service.post_revenue_recognition(RevenueRecognitionData(
            recognition_id="rec-1", company_id="co-1", recognition_date=date(2025, 4, 20),
            receipt_number="RE-0001", client_name="Jane Guest",
            amount=Decimal("1000.00"), revenue_account="4010", project_id="yacht-1",
        ), "alice")

        held_entry = seeded_session.get(JournalEntry, held.journal_entry_id)
        released_entry = seeded_session.get(JournalEntry, released.journal_entry_id)
        assert [l.account_code for l in held_entry.lines] == ["1000", "2300", "2300", "2200"]
        assert released_entry.source_document_type == "revenue_recognition"
        assert debit_accounts(released_entry) == ["2300"]
        deposits = sum(l.amount for l in held_entry.lines if l.account_code == "2300")
        assert deposits == released_entry.total_debit == Decimal("1000.00")

    def test_recognition_uses_credit_override(self, seeded_session):
        EventSettingsService(seeded_session).upsert(
            "co-1", EventType.REVENUE_RECOGNIZED,
            EventSettingUpdate(auto_post=True, default_credit_account="4020"),
        )
        result = JournalPostingService(seeded_session).post_revenue_recognition(
            RevenueRecognitionData(
                recognition_id="rec-1", company_id="co-1", recognition_date=date(2025, 4, 20),
                receipt_number="RE-0001", client_name="Jane Guest", amount=Decimal("500.00"),
            ), "alice",
        )
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)

        assert result.status == EntryStatus.POSTED
        assert entry.lines[1].account_code == "4020"
        _, _, balance = JournalEntryService(seeded_session).get_account_balance("2300", "co-1")
        assert balance == Decimal("-500.00")


class TestOpeningBalance:

    def opening(self, equity="42000"):
        return OpeningBalanceData(
            company_id="co-1", fiscal_year="2024-2025", entry_date=date(2024, 11, 1),
            balances=[
                OpeningBalanceLine(account_code="1010", debit_amount=Decimal("50000")),
                OpeningBalanceLine(account_code="2050", credit_amount=Decimal("8000")),
                OpeningBalanceLine(account_code="3000", credit_amount=Decimal(equity)),
            ],
        )

    def test_posted_once_per_company_and_year(self, seeded_session):
        service = JournalPostingService(seeded_session)
        first = service.post_opening_balance(self.opening(), "alice")
        second = service.post_opening_balance(self.opening(), "alice")
        entry = seeded_session.get(JournalEntry, first.journal_entry_id)

        assert first.success is True
        assert entry.source_document_id == "co-1:2024-2025"
        assert entry.total_debit == entry.total_credit == Decimal("50000.00")
        assert second.skipped is True
        assert len(entries(seeded_session)) == 1

    def test_unbalanced_balances_rejected(self, seeded_session):
        result = JournalPostingService(seeded_session).post_opening_balance(
            self.opening(equity="41000"), "alice"
        )

        assert result.success is False
        assert result.error_code == "UNBALANCED"
        assert entries(seeded_session) == []


# --- Manual entries ---

class TestManualEntries:

    def _request(self, credit="100.00"):
        return ManualEntryCreate(
            company_id="co-1",
            entry_date=date(2025, 3, 20),
            description="Accrue rent",
            lines=[
                JournalLineCreate(account_code="6100", entry_type=EntryType.DEBIT, amount=Decimal("100.00")),
                JournalLineCreate(account_code="2100", entry_type=EntryType.CREDIT, amount=Decimal(credit)),
            ],
            attachments=[{"id": "f-1", "name": "lease.pdf", "url": "https://files.example/f-1"}],
        )

    def test_create_then_post(self, seeded_session):
        service = JournalPostingService(seeded_session)
        created = service.create_manual_entry(self._request(), "alice")
        posted = service.post_entry(created.journal_entry_id, "bob")

        assert created.status == EntryStatus.DRAFT
        assert posted.success is True
        assert posted.status == EntryStatus.POSTED
        assert posted.reference_number == created.reference_number

    def test_unbalanced_draft_saved_but_not_posted(self, seeded_session):
        service = JournalPostingService(seeded_session)
        created = service.create_manual_entry(self._request(credit="90.00"), "alice")
        posted = service.post_entry(created.journal_entry_id, "bob")

        assert created.success is True
        assert posted.success is False
        assert posted.error_code == "UNBALANCED"

    def test_fix_draft_then_post(self, seeded_session):
        service = JournalPostingService(seeded_session)
        created = service.create_manual_entry(self._request(credit="90.00"), "alice")
        service.update_manual_entry(created.journal_entry_id, ManualEntryUpdate(
            lines=self._request().lines
        ))
        assert service.post_entry(created.journal_entry_id, "bob").success is True

    def test_posted_entry_cannot_be_updated_or_deleted(self, seeded_session):
        service = JournalPostingService(seeded_session)
        created = service.create_manual_entry(self._request(), "alice")
        service.post_entry(created.journal_entry_id, "bob")

        update = service.update_manual_entry(
            created.journal_entry_id, ManualEntryUpdate(description="Changed")
        )
        delete = service.delete_entry(created.journal_entry_id)
        repost = service.post_entry(created.journal_entry_id, "bob")

        assert update.error_code == delete.error_code == repost.error_code == "ALREADY_POSTED"

    def test_attachments_stored(self, seeded_session):
        result = JournalPostingService(seeded_session).create_manual_entry(self._request(), "alice")
        entry = seeded_session.get(JournalEntry, result.journal_entry_id)
        assert entry.attachments == [{
            "id": "f-1", "name": "lease.pdf", "url": "https://files.example/f-1", "type": None,
        }]

    def test_missing_entry(self, seeded_session):
        result = JournalPostingService(seeded_session).post_entry(999, "bob")
        assert result.success is False
        assert result.error_code == "ENTRY_NOT_FOUND"
