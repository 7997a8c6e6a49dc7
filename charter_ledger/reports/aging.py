"""
Receivable and payable aging.

A pure fold over outstanding documents: days overdue is
as_of_date - due_date, and each document lands in exactly one
bucket. Documents with nothing outstanding are left out.
"""

from datetime import date
from decimal import Decimal

from charter_ledger.schemas.reports import (
    AgingBucket,
    AgingDocument,
    AgingItem,
    AgingKind,
    AgingReport,
)

# (label, lowest days overdue, highest days overdue)
AGING_BUCKETS = [
    ("Current", None, 0),
    ("1-30 days", 1, 30),
    ("31-60 days", 31, 60),
    ("61-90 days", 61, 90),
    ("90+ days", 91, None),
]


def bucket_label(days_overdue: int) -> str:
    for label, low, high in AGING_BUCKETS:
        if (low is None or days_overdue >= low) and (high is None or days_overdue <= high):
            return label
    raise ValueError(f"No aging bucket for {days_overdue} days")


def build_aging_report(
    documents: list[AgingDocument],
    as_of_date: date,
    kind: AgingKind = AgingKind.RECEIVABLE,
) -> AgingReport:
    buckets = {label: AgingBucket(label=label) for label, _, _ in AGING_BUCKETS}

    for document in documents:
        outstanding = document.outstanding
        if outstanding <= 0:
            continue
        due_date = document.due_date or document.document_date
        days_overdue = (as_of_date - due_date).days
        bucket = buckets[bucket_label(days_overdue)]
        bucket.amount += outstanding
        bucket.count += 1
        bucket.items.append(AgingItem(
            document_id=document.document_id,
            number=document.number,
            counterparty=document.counterparty,
            due_date=due_date,
            days_overdue=days_overdue,
            outstanding=outstanding,
        ))

    ordered = list(buckets.values())
    return AgingReport(
        kind=kind,
        as_of_date=as_of_date,
        buckets=ordered,
        total_amount=sum((b.amount for b in ordered), Decimal("0")),
        total_count=sum(b.count for b in ordered),
    )
