"""
Report schemas.

Every periodic report is a list of rows followed by a TOTAL row,
so the same CSV writer can flatten any of them.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from charter_ledger.models.enums import AccountType
from charter_ledger.schemas.journal import Attachment

ZERO = Decimal("0")


# --- P&L by project ---

class ProjectPLRow(BaseModel):
    period: str
    label: str
    income: Decimal = ZERO
    management_fee: Decimal = ZERO
    expense: Decimal = ZERO
    profit: Decimal = ZERO


class ProjectPLReport(BaseModel):
    company_id: str
    project_id: str | None
    fiscal_year: str
    management_fee_percent: Decimal
    rows: list[ProjectPLRow]
    total: ProjectPLRow


class DrillDownDirection(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class DrillDownRow(BaseModel):
    """One journal line behind a P&L cell."""
    entry_date: date
    description: str
    reference_number: str
    account_code: str
    category: str
    amount: Decimal
    attachments: list[Attachment] = Field(default_factory=list)


# --- Aging ---

class AgingKind(str, Enum):
    RECEIVABLE = "receivable"
    PAYABLE = "payable"


class AgingDocument(BaseModel):
    """An invoice or expense with money still outstanding."""
    document_id: str
    number: str
    counterparty: str
    document_date: date
    due_date: date | None = None
    total_amount: Decimal
    paid_amount: Decimal = ZERO

    @property
    def outstanding(self) -> Decimal:
        return self.total_amount - self.paid_amount


class AgingItem(BaseModel):
    document_id: str
    number: str
    counterparty: str
    due_date: date
    days_overdue: int
    outstanding: Decimal


class AgingBucket(BaseModel):
    label: str
    amount: Decimal = ZERO
    count: int = 0
    items: list[AgingItem] = Field(default_factory=list)


class AgingReport(BaseModel):
    kind: AgingKind
    as_of_date: date
    buckets: list[AgingBucket]
    total_amount: Decimal
    total_count: int


# --- VAT ---

class VatStatus(str, Enum):
    PAYABLE = "payable"
    REFUNDABLE = "refundable"
    ZERO = "zero"


class VatSummaryRow(BaseModel):
    period: str
    label: str
    input_vat: Decimal = ZERO
    output_vat: Decimal = ZERO
    net_vat: Decimal = ZERO
    status: VatStatus = VatStatus.ZERO


class VatSummaryReport(BaseModel):
    company_id: str
    date_from: date
    date_to: date
    rows: list[VatSummaryRow]
    total: VatSummaryRow


# --- Trial balance ---

class TrialBalanceRow(BaseModel):
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal = ZERO
    credit: Decimal = ZERO


class TrialBalanceReport(BaseModel):
    company_id: str
    as_of_date: date
    rows: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool


# --- Reference number gaps ---

class ReferenceGap(BaseModel):
    prefix: str
    first: int
    last: int
    missing: list[str]


class ReferenceGapReport(BaseModel):
    company_id: str
    gaps: list[ReferenceGap]
    total_missing: int


class AgingRequest(BaseModel):
    as_of_date: date
    kind: AgingKind = AgingKind.RECEIVABLE
    documents: list[AgingDocument]
