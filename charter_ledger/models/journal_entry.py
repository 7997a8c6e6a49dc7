"""
Journal entry model.

A journal entry is the atomic unit of the ledger: a header plus
two or more debit/credit lines whose totals must balance. Entries
start as drafts and become immutable once posted.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, Boolean, Integer, JSON,
    ForeignKey, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from charter_ledger.models.base import Base
from charter_ledger.models.enums import EntryStatus, EntryType

REFERENCE_CONSTRAINT = "uq_journal_entries_company_reference"
SOURCE_DOCUMENT_CONSTRAINT = "uq_journal_entries_source_document"


class JournalEntry(Base):
    """
    Header row of a journal entry.

    total_debit and total_credit are cached sums of the lines and
    are recomputed whenever the lines change. Uniqueness of the
    reference number (per company) and of the source document are
    enforced by the database, not only by the services.
    """

    __tablename__ = "journal_entries"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "reference_number",
            name=REFERENCE_CONSTRAINT,
        ),
        UniqueConstraint(
            "source_document_type", "source_document_id",
            name=SOURCE_DOCUMENT_CONSTRAINT,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    reference_number: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    company_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(EntryStatus, name="entry_status_enum", create_constraint=True),
        nullable=False,
        default=EntryStatus.DRAFT,
    )
    total_debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    total_credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    posted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    posted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    # Deleted drafts keep their row so the reference number is never reissued
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    attachments: Mapped[list | None] = mapped_column(JSON, nullable=True)
    source_document_type: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    source_document_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
    is_auto_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    lines: Mapped[list["JournalEntryLine"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalEntryLine.line_order",
    )

    @property
    def is_posted(self) -> bool:
        return self.status == EntryStatus.POSTED

    def __repr__(self) -> str:
        return f"<JournalEntry {self.reference_number} ({self.status.value})>"


class JournalEntryLine(Base):
    """One debit or credit leg, owned by its journal entry."""

    __tablename__ = "journal_entry_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    account_code: Mapped[str] = mapped_column(
        ForeignKey("chart_of_accounts.code"), nullable=False, index=True
    )
    account_name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(EntryType, name="entry_type_enum"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    project_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True
    )

    journal_entry: Mapped["JournalEntry"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return (
            f"<JournalEntryLine {self.entry_type.value} "
            f"{self.account_code} {self.amount} {self.currency}>"
        )
