"""
Duplicate-posting guard.

At most one live journal entry may exist per source document.
This lookup is the cheap first check; the unique constraint on
(source_document_type, source_document_id) is what actually holds
under concurrent triggers.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.journal_entry import JournalEntry


class DuplicateGuard:

    def __init__(self, db: Session):
        self.db = db

    def find(self, source_type: str, source_id: str) -> JournalEntry | None:
        return self.db.execute(
            select(JournalEntry).where(
                JournalEntry.source_document_type == source_type,
                JournalEntry.source_document_id == source_id,
            ).limit(1)
        ).scalar_one_or_none()

    def exists(self, source_type: str, source_id: str) -> bool:
        return self.find(source_type, source_id) is not None
