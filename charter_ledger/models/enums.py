"""
Shared enumerations for database models.

Mapped to database enums so only valid values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class NormalBalance(str, enum.Enum):
    """Side on which an account's balance increases."""
    DEBIT = "Debit"
    CREDIT = "Credit"


class EntryType(str, enum.Enum):
    """Direction of a journal line."""
    DEBIT = "debit"
    CREDIT = "credit"


class EntryStatus(str, enum.Enum):
    """Journal entry lifecycle. POSTED is terminal."""
    DRAFT = "draft"
    POSTED = "posted"


class PeriodStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"


class SourceDocumentType(str, enum.Enum):
    """Business documents that generate journal entries automatically."""
    EXPENSE = "expense"
    EXPENSE_PAYMENT = "expense_payment"
    RECEIPT = "receipt"
    GATEWAY_SETTLEMENT = "gateway_settlement"
    REVENUE_RECOGNITION = "revenue_recognition"
    OPENING_BALANCE = "opening_balance"
    YEAR_END_CLOSE = "year_end_close"


class EventType(str, enum.Enum):
    """Business events that can be configured per company."""
    EXPENSE_APPROVED = "EXPENSE_APPROVED"
    EXPENSE_PAID = "EXPENSE_PAID"
    RECEIPT_RECEIVED = "RECEIPT_RECEIVED"
    GATEWAY_SETTLEMENT = "GATEWAY_SETTLEMENT"
    REVENUE_RECOGNIZED = "REVENUE_RECOGNIZED"
    OPENING_BALANCE = "OPENING_BALANCE"
