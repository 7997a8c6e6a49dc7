"""
Pydantic schemas for journal entries.

Covers manual entry input, entry responses and the PostingResult
returned by every public posting operation.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from charter_ledger.models.enums import EntryStatus, EntryType


class Attachment(BaseModel):
    """Reference to a stored file. The file itself lives elsewhere."""
    id: str
    name: str
    url: str
    type: str | None = None


# --- Request Schemas ---

class JournalLineCreate(BaseModel):
    """A single debit or credit line."""
    account_code: str = Field(min_length=1, max_length=20)
    entry_type: EntryType
    amount: Decimal = Field(gt=0, decimal_places=2)
    description: str = Field(default="", max_length=500)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    project_id: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v


class ManualEntryCreate(BaseModel):
    """
    A manual journal entry, saved as a draft.

    Drafts need at least two lines but do not need to balance.
    Balance is enforced when the entry is posted.
    """
    company_id: str = Field(min_length=1, max_length=64)
    entry_date: date
    description: str = Field(min_length=1, max_length=500)
    lines: list[JournalLineCreate] = Field(min_length=2)
    attachments: list[Attachment] | None = None


class ManualEntryUpdate(BaseModel):
    """Partial update of a draft. Omitted fields are left as they are."""
    entry_date: date | None = None
    description: str | None = Field(default=None, min_length=1, max_length=500)
    lines: list[JournalLineCreate] | None = Field(default=None, min_length=2)
    attachments: list[Attachment] | None = None


# --- Response Schemas ---

class JournalLineResponse(BaseModel):
    id: int
    line_order: int
    account_code: str
    account_name: str | None
    description: str
    entry_type: EntryType
    amount: Decimal
    currency: str
    project_id: str | None

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    """Journal entry with its lines."""
    id: int
    reference_number: str
    entry_date: date
    company_id: str
    description: str
    status: EntryStatus
    total_debit: Decimal
    total_credit: Decimal
    created_by: str
    created_at: datetime
    posted_by: str | None
    posted_at: datetime | None
    updated_at: datetime
    attachments: list[Attachment] | None
    source_document_type: str | None
    source_document_id: str | None
    is_auto_generated: bool
    lines: list[JournalLineResponse]

    model_config = {"from_attributes": True}


class PostingResult(BaseModel):
    """
    Outcome of a public posting operation.

    success=True with skipped=True means nothing was written, for
    example because the source document was already journalized.
    On failure, error carries the message to show and error_code
    the machine-readable reason.
    """
    success: bool
    journal_entry_id: int | None = None
    reference_number: str | None = None
    status: EntryStatus | None = None
    skipped: bool = False
    error: str | None = None
    error_code: str | None = None
