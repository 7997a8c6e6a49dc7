"""
Journal line builders.

One pure function per business event. Each returns a BuiltEntry:
the entry description plus ordered, unsaved lines. Account codes
that depend on the database (bank GL codes, per-company default
overrides) are resolved by the caller and passed in.

Patterns:

    Expense approval     Dr expense lines, Dr VAT receivable / Cr accounts payable
    Expense payment      Dr accounts payable / Cr bank or cash
    Receipt              Dr bank, cash or card receivable / Cr revenue lines, Cr VAT payable
    Charter deposit      as a receipt, with the revenue lines credited to deposits received
    Revenue recognition  Dr deposits received / Cr revenue
    Gateway settlement   Dr bank (net), Dr processing fee, Dr VAT on fee / Cr card receivable (gross)
    Opening balances     Dr and Cr each account as given
    Year-end close       Dr revenue, Cr expense, net income to retained earnings

Zero and negative amounts are never emitted as lines.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable

from pydantic import BaseModel

from charter_ledger.config import DefaultAccounts, get_settings
from charter_ledger.models.enums import EntryType
from charter_ledger.schemas.events import (
    ExpenseApprovalData,
    ExpensePaymentData,
    GatewaySettlementData,
    OpeningBalanceData,
    ReceiptData,
    ReceiptPayment,
    RevenueRecognitionData,
)
from charter_ledger.schemas.journal import JournalLineCreate

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Card gateways settle later, so their receipts sit in a holding account.
GATEWAY_PAYMENT_METHODS = {"beam"}


class BuiltEntry(BaseModel):
    description: str
    lines: list[JournalLineCreate]


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _line(account_code, entry_type, amount, description, currency=None, project_id=None):
    return JournalLineCreate(
        account_code=account_code,
        entry_type=entry_type,
        amount=money(amount),
        description=description,
        currency=currency,
        project_id=project_id,
    )


def net_of_vat(amounts: list[Decimal], subtotal: Decimal) -> list[Decimal]:
    """
    Scale VAT-inclusive line amounts back to the pre-tax subtotal.

    When the amounts add up to no more than the subtotal they are
    already net and are returned as they are. Otherwise each line
    gets amount / total * subtotal in whole cents, and the cents left
    over go to the lines with the largest remainders, so the result
    always adds up to the subtotal exactly.
    """
    total = sum(amounts, ZERO)
    if not amounts or total - subtotal <= get_settings().BALANCE_TOLERANCE:
        return [money(a) for a in amounts]

    line_cents = [int(money(a) / CENT) for a in amounts]
    total_cents = sum(line_cents)
    if not total_cents:
        return [money(a) for a in amounts]
    target_cents = int(money(subtotal) / CENT)

    shares = [divmod(c * target_cents, total_cents) for c in line_cents]
    cents = [quotient for quotient, _ in shares]
    leftover = target_cents - sum(cents)
    by_remainder = sorted(range(len(shares)), key=lambda i: shares[i][1], reverse=True)
    for i in by_remainder[:leftover]:
        cents[i] += 1
    return [Decimal(c) * CENT for c in cents]


def build_expense_approval(
    data: ExpenseApprovalData,
    default_expense_account: str = DefaultAccounts.DEFAULT_EXPENSE,
) -> BuiltEntry:
    lines = []
    for item in data.line_items:
        if item.amount > 0:
            lines.append(_line(
                item.account_code or default_expense_account,
                EntryType.DEBIT,
                item.amount,
                item.description,
                data.currency,
                item.project_id,
            ))

    if data.total_vat_amount > 0:
        lines.append(_line(
            DefaultAccounts.VAT_RECEIVABLE, EntryType.DEBIT,
            data.total_vat_amount, "Input VAT", data.currency,
        ))

    if data.total_amount > 0:
        lines.append(_line(
            DefaultAccounts.ACCOUNTS_PAYABLE, EntryType.CREDIT,
            data.total_amount, f"Payable to {data.vendor_name}", data.currency,
        ))

    return BuiltEntry(
        description=f"Expense approval - {data.expense_number} - {data.vendor_name}",
        lines=lines,
    )


def build_expense_payment(data: ExpensePaymentData, cash_account: str) -> BuiltEntry:
    lines = []
    if data.payment_amount > 0:
        lines = [
            _line(
                DefaultAccounts.ACCOUNTS_PAYABLE, EntryType.DEBIT,
                data.payment_amount, f"Payment to {data.vendor_name}", data.currency,
            ),
            _line(
                cash_account, EntryType.CREDIT,
                data.payment_amount, f"Payment for {data.expense_number}", data.currency,
            ),
        ]
    return BuiltEntry(
        description=f"Expense payment - {data.expense_number} - {data.vendor_name}",
        lines=lines,
    )


def is_gateway_payment(payment: ReceiptPayment) -> bool:
    return (payment.payment_method or "").strip().lower() in GATEWAY_PAYMENT_METHODS


def is_deposit(data: ReceiptData) -> bool:
    return data.charter_date_to is not None and data.charter_date_to > data.receipt_date


def build_receipt(
    data: ReceiptData,
    resolve_payment_account: Callable[[ReceiptPayment], str],
    default_revenue_account: str = DefaultAccounts.DEFAULT_REVENUE,
) -> BuiltEntry:
    """
    Build the revenue recognition entry for a receipt.

    resolve_payment_account maps each payment to the account it is
    debited to (bank GL code, petty cash or card receivable). When the
    charter ends after the receipt date every revenue line is credited
    to deposits received instead, keeping its project.
    """
    deferred = is_deposit(data)
    lines = []
    for payment in data.payments:
        if payment.amount > 0:
            lines.append(_line(
                resolve_payment_account(payment), EntryType.DEBIT,
                payment.amount, f"Received from {data.client_name}", data.currency,
            ))

    revenue_items = [item for item in data.line_items if item.amount > 0]
    net_amounts = net_of_vat([item.amount for item in revenue_items], data.total_subtotal)
    for item, amount in zip(revenue_items, net_amounts):
        if amount > 0:
            lines.append(_line(
                DefaultAccounts.DEFERRED_REVENUE if deferred
                else item.account_code or default_revenue_account,
                EntryType.CREDIT,
                amount,
                item.description,
                data.currency,
                item.project_id,
            ))

    if data.total_vat_amount > 0:
        lines.append(_line(
            DefaultAccounts.VAT_PAYABLE, EntryType.CREDIT,
            data.total_vat_amount, "Output VAT", data.currency,
        ))

    kind = "Charter deposit" if deferred else "Receipt"
    return BuiltEntry(
        description=f"{kind} - {data.receipt_number} - {data.client_name}",
        lines=lines,
    )


def build_gateway_settlement(data: GatewaySettlementData, bank_account: str) -> BuiltEntry:
    gateway = data.gateway
    fee_net = data.fee_amount - data.fee_vat_amount
    net = data.net_amount if data.net_amount is not None else data.gross_amount - data.fee_amount

    candidates = [
        (bank_account, EntryType.DEBIT, net, f"Settlement from {gateway}"),
        (DefaultAccounts.PROCESSING_FEES, EntryType.DEBIT, fee_net, f"{gateway} processing fee"),
        (DefaultAccounts.VAT_RECEIVABLE, EntryType.DEBIT, data.fee_vat_amount, f"VAT on {gateway} fee"),
        (DefaultAccounts.CREDIT_CARD_RECEIVABLE, EntryType.CREDIT, data.gross_amount,
         f"Clear {gateway} card receivable"),
    ]
    lines = [
        _line(code, entry_type, amount, description, data.currency)
        for code, entry_type, amount, description in candidates
        if amount > 0
    ]
    return BuiltEntry(
        description=f"Gateway settlement - {gateway} - {data.settlement_id}",
        lines=lines,
    )


def build_revenue_recognition(data: RevenueRecognitionData, revenue_account: str) -> BuiltEntry:
    lines = [
        _line(
            DefaultAccounts.DEFERRED_REVENUE, EntryType.DEBIT,
            data.amount, f"Release deposit {data.receipt_number}", data.currency,
        ),
        _line(
            revenue_account, EntryType.CREDIT,
            data.amount, f"Charter revenue - {data.client_name}", data.currency,
            data.project_id,
        ),
    ]
    return BuiltEntry(
        description=f"Revenue recognition - {data.receipt_number} - {data.client_name}",
        lines=lines,
    )


def build_opening_balance(data: OpeningBalanceData) -> BuiltEntry:
    lines = []
    for balance in data.balances:
        description = balance.description or "Opening balance"
        if balance.debit_amount > 0:
            lines.append(_line(
                balance.account_code, EntryType.DEBIT,
                balance.debit_amount, description, data.currency,
            ))
        if balance.credit_amount > 0:
            lines.append(_line(
                balance.account_code, EntryType.CREDIT,
                balance.credit_amount, description, data.currency,
            ))
    return BuiltEntry(
        description=f"Opening balances - FY {data.fiscal_year}",
        lines=lines,
    )


def build_year_end_close(
    fiscal_year: str,
    revenue_balances: dict[str, Decimal],
    expense_balances: dict[str, Decimal],
    retained_earnings_account: str = DefaultAccounts.RETAINED_EARNINGS,
) -> BuiltEntry:
    """
    Zero every revenue and expense account into retained earnings.

    revenue_balances are credit-normal (credits minus debits) and
    expense_balances debit-normal. A balance on the unusual side is
    closed from the other side. Accounts at zero get no line.
    """
    lines = []
    for code, balance in sorted(revenue_balances.items()):
        if balance:
            entry_type = EntryType.DEBIT if balance > 0 else EntryType.CREDIT
            lines.append(_line(code, entry_type, abs(balance), "Close revenue"))
    for code, balance in sorted(expense_balances.items()):
        if balance:
            entry_type = EntryType.CREDIT if balance > 0 else EntryType.DEBIT
            lines.append(_line(code, entry_type, abs(balance), "Close expense"))

    net_income = sum(revenue_balances.values(), ZERO) - sum(expense_balances.values(), ZERO)
    if net_income:
        entry_type = EntryType.CREDIT if net_income > 0 else EntryType.DEBIT
        lines.append(_line(
            retained_earnings_account, entry_type, abs(net_income),
            f"Net {'income' if net_income > 0 else 'loss'} FY {fiscal_year}",
        ))
    return BuiltEntry(
        description=f"Year-end close - FY {fiscal_year}",
        lines=lines,
    )
