"""
Journal reference numbers: JE-{year}-{sequence}.

The sequence restarts at 1 each calendar year per company and is
one more than the highest sequence already issued under that
prefix. Soft-deleted drafts keep their numbers, so a number is
never handed out twice. Two concurrent callers can still compute
the same value; the unique constraint on (company_id,
reference_number) rejects the second insert and the lifecycle
manager retries with a fresh number.
"""

import re
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.journal_entry import JournalEntry

REFERENCE_PATTERN = re.compile(r"^JE-(\d{4})-(\d+)$")


def reference_prefix(year: int) -> str:
    return f"JE-{year}-"


def format_reference(year: int, sequence: int) -> str:
    return f"{reference_prefix(year)}{sequence:04d}"


def parse_reference(reference_number: str) -> tuple[int, int] | None:
    """Return (year, sequence), or None for numbers not in JE format."""
    match = REFERENCE_PATTERN.match(reference_number)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


class ReferenceNumberGenerator:

    def __init__(self, db: Session):
        self.db = db

    def issued_sequences(self, company_id: str, year: int) -> list[int]:
        prefix = reference_prefix(year)
        numbers = self.db.execute(
            select(JournalEntry.reference_number).where(
                JournalEntry.company_id == company_id,
                JournalEntry.reference_number.like(f"{prefix}%"),
            )
        ).scalars().all()
        sequences = []
        for number in numbers:
            parsed = parse_reference(number)
            if parsed and parsed[0] == year:
                sequences.append(parsed[1])
        return sorted(sequences)

    def next_reference(self, company_id: str, year: int | None = None) -> str:
        year = year or date.today().year
        sequences = self.issued_sequences(company_id, year)
        return format_reference(year, (sequences[-1] if sequences else 0) + 1)
