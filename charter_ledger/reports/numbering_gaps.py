"""
Gaps in journal reference numbering.

Only live entries count, so the number of a deleted draft shows up
as a gap.
"""

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.journal_entry import JournalEntry
from charter_ledger.schemas.reports import ReferenceGap, ReferenceGapReport
from charter_ledger.services.reference_numbers import (
    format_reference,
    parse_reference,
    reference_prefix,
)


def find_gaps(reference_numbers: list[str]) -> list[ReferenceGap]:
    by_year = defaultdict(set)
    for number in reference_numbers:
        parsed = parse_reference(number)
        if parsed:
            by_year[parsed[0]].add(parsed[1])

    gaps = []
    for year in sorted(by_year):
        sequences = by_year[year]
        last = max(sequences)
        missing = [format_reference(year, n) for n in range(1, last) if n not in sequences]
        if missing:
            gaps.append(ReferenceGap(
                prefix=reference_prefix(year),
                first=min(sequences),
                last=last,
                missing=missing,
            ))
    return gaps


def reference_gap_report(db: Session, company_id: str) -> ReferenceGapReport:
    numbers = db.execute(
        select(JournalEntry.reference_number).where(
            JournalEntry.company_id == company_id,
            JournalEntry.deleted_at.is_(None),
        )
    ).scalars().all()
    gaps = find_gaps(list(numbers))
    return ReferenceGapReport(
        company_id=company_id,
        gaps=gaps,
        total_missing=sum(len(g.missing) for g in gaps),
    )
