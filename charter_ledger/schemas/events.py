"""
Business event payloads.

Each payload carries everything the matching line builder needs.
Amounts are Decimal. Line items with zero or negative amounts are
accepted here and skipped by the builders.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class ExpenseLineItem(BaseModel):
    description: str
    account_code: str | None = None
    amount: Decimal
    project_id: str | None = None


class ExpenseApprovalData(BaseModel):
    """An approved expense, recognized as a payable."""
    expense_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    expense_number: str
    expense_date: date
    vendor_name: str
    line_items: list[ExpenseLineItem]
    total_subtotal: Decimal
    total_vat_amount: Decimal = Decimal("0")
    total_amount: Decimal
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class ExpensePaymentData(BaseModel):
    """A payment against an approved expense."""
    expense_id: str
    payment_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    expense_number: str
    payment_date: date
    vendor_name: str
    payment_amount: Decimal = Field(gt=0)
    bank_account_id: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class ReceiptLineItem(BaseModel):
    description: str
    account_code: str | None = None
    amount: Decimal
    project_id: str | None = None


class ReceiptPayment(BaseModel):
    amount: Decimal
    bank_account_id: str | None = None
    payment_method: str | None = None


class ReceiptData(BaseModel):
    """
    A receipt: revenue recognized together with the cash received.

    Line item amounts may be quoted VAT-inclusive. When they add up
    to more than total_subtotal, the revenue credits are scaled
    back to the subtotal.

    A receipt for a charter that ends after the receipt date is a
    deposit: its revenue is held in charter deposits received until
    a RevenueRecognitionData event releases it.
    """
    receipt_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    receipt_number: str
    receipt_date: date
    client_name: str
    line_items: list[ReceiptLineItem]
    total_subtotal: Decimal
    total_vat_amount: Decimal = Decimal("0")
    total_amount: Decimal
    payments: list[ReceiptPayment]
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    charter_date_to: date | None = None


class GatewaySettlementData(BaseModel):
    """
    Funds from a card gateway arriving in the bank.

    fee_amount includes fee_vat_amount. net_amount defaults to
    gross_amount - fee_amount.
    """
    settlement_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    settlement_date: date
    gateway: str = "beam"
    bank_account_id: str | None = None
    gross_amount: Decimal = Field(gt=0)
    fee_amount: Decimal = Field(default=Decimal("0"), ge=0)
    fee_vat_amount: Decimal = Field(default=Decimal("0"), ge=0)
    net_amount: Decimal | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class RevenueRecognitionData(BaseModel):
    """Release of a charter deposit into revenue once the charter has ended."""
    recognition_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)
    recognition_date: date
    receipt_number: str
    client_name: str
    amount: Decimal = Field(gt=0)
    revenue_account: str | None = None
    project_id: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class OpeningBalanceLine(BaseModel):
    account_code: str = Field(min_length=1, max_length=20)
    debit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    credit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    description: str | None = None


class OpeningBalanceData(BaseModel):
    """
    Balances carried into the ledger when a company starts using it.

    One entry per company and fiscal year. Debits and credits must
    balance.
    """
    company_id: str = Field(min_length=1)
    fiscal_year: str = Field(pattern=r"^\d{4}-\d{4}$")
    entry_date: date
    balances: list[OpeningBalanceLine] = Field(min_length=1)
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @property
    def source_id(self) -> str:
        return f"{self.company_id}:{self.fiscal_year}"
