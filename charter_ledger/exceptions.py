"""
Typed errors for the journal posting engine.

Every error carries a machine-readable ``code`` and a ``retryable``
flag so callers can tell "show the user", "retry once" and
"nothing happened" apart without parsing messages.

    LedgerError
    +-- PeriodClosedError               PERIOD_CLOSED
    +-- UnbalancedEntryError            UNBALANCED
    +-- DuplicateSourceDocumentError    DUPLICATE_SOURCE_DOCUMENT
    +-- UnknownAccountCodeError         UNKNOWN_ACCOUNT_CODE
    +-- ReferenceNumberConflictError    REFERENCE_NUMBER_CONFLICT (retryable)
    +-- AlreadyPostedError              ALREADY_POSTED
    +-- EntryValidationError            INVALID_ENTRY
    +-- EntryNotFoundError              ENTRY_NOT_FOUND
    +-- AccountNotFoundError            ACCOUNT_NOT_FOUND
    +-- PeriodStateError                INVALID_PERIOD_STATE
    +-- YearEndNotReadyError            YEAR_END_NOT_READY

Services raise these. The public posting entry points convert them
into PostingResult values.
"""

from decimal import Decimal


class LedgerError(ValueError):
    """Base class for all ledger errors."""

    code: str = "LEDGER_ERROR"
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PeriodClosedError(LedgerError):
    code = "PERIOD_CLOSED"

    def __init__(self, company_id: str, period: str):
        self.company_id = company_id
        self.period = period
        super().__init__(
            f"Cannot post to closed period {period} for company {company_id}. "
            f"Please reopen the period first."
        )


class UnbalancedEntryError(LedgerError):
    code = "UNBALANCED"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal entry is not balanced: "
            f"debit={total_debit:.2f}, credit={total_credit:.2f}"
        )


class DuplicateSourceDocumentError(LedgerError):
    code = "DUPLICATE_SOURCE_DOCUMENT"

    def __init__(self, source_type: str, source_id: str):
        self.source_type = source_type
        self.source_id = source_id
        super().__init__(
            f"Journal entry already exists for {source_type} {source_id}"
        )


class UnknownAccountCodeError(LedgerError):
    code = "UNKNOWN_ACCOUNT_CODE"

    def __init__(self, account_codes: list[str]):
        self.account_codes = sorted(account_codes)
        super().__init__(
            f"Unknown account codes: {', '.join(self.account_codes)}"
        )


class ReferenceNumberConflictError(LedgerError):
    code = "REFERENCE_NUMBER_CONFLICT"
    retryable = True

    def __init__(self, reference_number: str):
        self.reference_number = reference_number
        super().__init__(
            f"Reference number {reference_number} is already in use"
        )


class AlreadyPostedError(LedgerError):
    code = "ALREADY_POSTED"

    def __init__(self, entry_id: int, reference_number: str):
        self.entry_id = entry_id
        self.reference_number = reference_number
        super().__init__(
            f"Journal entry {reference_number} is posted and cannot be changed"
        )


class EntryValidationError(LedgerError):
    code = "INVALID_ENTRY"


class EntryNotFoundError(LedgerError):
    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} not found")


class AccountNotFoundError(LedgerError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, code: str):
        self.account_code = code
        super().__init__(f"Account {code} not found")


class PeriodStateError(LedgerError):
    code = "INVALID_PERIOD_STATE"


class YearEndNotReadyError(LedgerError):
    code = "YEAR_END_NOT_READY"

    def __init__(self, company_id: str, fiscal_year: str, reasons: list[str]):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        self.reasons = reasons
        super().__init__(
            f"Fiscal year {fiscal_year} for company {company_id} cannot be closed: "
            f"{'; '.join(reasons)}"
        )
