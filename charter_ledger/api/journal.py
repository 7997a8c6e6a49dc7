"""
Manual journal entry endpoints.

Writes return a PostingResult. The acting user is taken from the
X-User header and recorded as created_by or posted_by; this
service does not authenticate it.
"""

from datetime import date

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from charter_ledger.exceptions import LedgerError
from charter_ledger.models.base import get_db
from charter_ledger.models.enums import EntryStatus
from charter_ledger.services.journal_service import JournalEntryService
from charter_ledger.services.posting_service import JournalPostingService
from charter_ledger.schemas.journal import (
    JournalEntryResponse,
    ManualEntryCreate,
    ManualEntryUpdate,
    PostingResult,
)
from charter_ledger.api.errors import http_error, raise_for_result

router = APIRouter(prefix="/journal-entries", tags=["Journal Entries"])


def _finish(db: Session, result: PostingResult) -> PostingResult:
    """Commit on success, roll back and raise on failure."""
    if not result.success:
        db.rollback()
        raise_for_result(result)
    db.commit()
    return result


@router.post("", response_model=PostingResult, status_code=201)
def create_manual_entry(
    request: ManualEntryCreate,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    """Save a manual entry as a draft. It does not need to balance yet."""
    return _finish(db, JournalPostingService(db).create_manual_entry(request, user))


@router.get("", response_model=list[JournalEntryResponse])
def list_entries(
    company_id: str | None = None,
    status: EntryStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    source_document_type: str | None = None,
    db: Session = Depends(get_db),
):
    return JournalEntryService(db).list_entries(
        company_id, status, date_from, date_to, source_document_type
    )


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        return JournalEntryService(db).get_entry(entry_id)
    except LedgerError as e:
        raise http_error(e)


@router.patch("/{entry_id}", response_model=PostingResult)
def update_entry(
    entry_id: int,
    request: ManualEntryUpdate,
    db: Session = Depends(get_db),
):
    """Edit a draft. Posted entries are rejected with 409."""
    return _finish(db, JournalPostingService(db).update_manual_entry(entry_id, request))


@router.post("/{entry_id}/post", response_model=PostingResult)
def post_entry(
    entry_id: int,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    """
    Post a draft.

    The entry must have at least two lines, a debit and a credit,
    and balance within tolerance. Its period must be open.
    """
    return _finish(db, JournalPostingService(db).post_entry(entry_id, user))


@router.delete("/{entry_id}", response_model=PostingResult)
def delete_entry(entry_id: int, db: Session = Depends(get_db)):
    return _finish(db, JournalPostingService(db).delete_entry(entry_id))
