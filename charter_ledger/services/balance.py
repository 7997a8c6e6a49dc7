"""
Balance validator.

Works on anything with entry_type and amount attributes: builder
output, request schemas or persisted lines.
"""

from decimal import Decimal

from charter_ledger.config import get_settings
from charter_ledger.exceptions import UnbalancedEntryError
from charter_ledger.models.enums import EntryType


def calculate_totals(lines) -> tuple[Decimal, Decimal]:
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    for line in lines:
        if line.entry_type == EntryType.DEBIT:
            total_debit += Decimal(line.amount)
        else:
            total_credit += Decimal(line.amount)
    return total_debit, total_credit


def is_balanced(lines, tolerance: Decimal | None = None) -> bool:
    if tolerance is None:
        tolerance = get_settings().BALANCE_TOLERANCE
    total_debit, total_credit = calculate_totals(lines)
    return abs(total_debit - total_credit) < tolerance


def assert_balanced(lines) -> tuple[Decimal, Decimal]:
    """Return (total_debit, total_credit), or raise UnbalancedEntryError."""
    total_debit, total_credit = calculate_totals(lines)
    if abs(total_debit - total_credit) >= get_settings().BALANCE_TOLERANCE:
        raise UnbalancedEntryError(total_debit, total_credit)
    return total_debit, total_credit
