"""
Built-in chart of accounts for a yacht-charter operator.

(code, name, account type, sub type, category, currency)
Normal balance follows the account type.
"""

from charter_ledger.models.enums import AccountType

A = AccountType.ASSET
L = AccountType.LIABILITY
E = AccountType.EQUITY
R = AccountType.REVENUE
X = AccountType.EXPENSE

DEFAULT_CHART = [
    ("1000", "Petty Cash THB", A, "Current Asset", "Cash & Equivalents", "THB"),
    ("1001", "Petty Cash EUR", A, "Current Asset", "Cash & Equivalents", "EUR"),
    ("1002", "Petty Cash USD", A, "Current Asset", "Cash & Equivalents", "USD"),
    ("1010", "Bank Account THB", A, "Current Asset", "Cash & Equivalents", "THB"),
    ("1011", "Bank Account EUR", A, "Current Asset", "Cash & Equivalents", "EUR"),
    ("1012", "Bank Account USD", A, "Current Asset", "Cash & Equivalents", "USD"),
    ("1020", "Cash on hand THB", A, "Current Asset", "Cash & Equivalents", "THB"),
    ("1140", "Credit Card Receivables", A, "Current Asset", "Receivables", None),
    ("1150", "Employee Advances", A, "Current Asset", "Receivables", None),
    ("1170", "VAT Receivable", A, "Current Asset", "Receivables", None),
    ("1200", "Inventory", A, "Current Asset", "Inventory", None),
    ("2010", "Accounts Payable - Fuel Suppliers", L, "Current Liability", "Payables", None),
    ("2020", "Accounts Payable - Provisions/Catering", L, "Current Liability", "Payables", None),
    ("2050", "Accounts Payable - Professional Services", L, "Current Liability", "Payables", None),
    ("2100", "Accrued Wages & Salaries", L, "Current Liability", "Accrued Expenses", None),
    ("2200", "VAT/GST Payable", L, "Current Liability", "Taxes & Withholdings", None),
    ("2210", "Income Tax Payable", L, "Current Liability", "Taxes & Withholdings", None),
    ("2300", "Charter Deposits Received", L, "Current Liability", "Deferred Revenue & Deposits", None),
    ("3000", "Ordinary Share Capital", E, "Share Capital", "Share Capital", None),
    ("3200", "Retained Earnings - Prior Years", E, "Retained Earnings", "Retained Earnings", None),
    ("4010", "Charter Revenue - Day Charters", R, "Operating Revenue", "Charter Revenue", None),
    ("4020", "Charter Revenue - Overnight charter", R, "Operating Revenue", "Charter Revenue", None),
    ("4100", "Food & Beverage Revenue", R, "Operating Revenue", "Ancillary Revenue", None),
    ("4300", "Yacht Management Fees", R, "Operating Revenue", "Management & Brokerage Revenue", None),
    ("4490", "Other Operating Revenue", R, "Operating Revenue", "Other Operating Revenue", None),
    ("5000", "Fuel", X, "Direct Cost of Sales", "Vessel Operating Costs", None),
    ("5100", "Boat Insurance", X, "Direct Cost of Sales", "Vessel Operating Costs", None),
    ("5200", "Guest Provisions - Food and Beverage", X, "Direct Cost of Sales", "Vessel Operating Costs - Provisions", None),
    ("6000", "Salaries - Management", X, "Operating Expense", "Office & Administrative Expenses", None),
    ("6100", "Office Rent", X, "Operating Expense", "Office & Administrative Expenses", None),
    ("6200", "Legal Fees Expense", X, "Operating Expense", "Professional Services", None),
    ("6500", "General Liability Insurance", X, "Operating Expense", "Insurance - Business", None),
    ("6530", "Property Insurance", X, "Operating Expense", "Insurance - Business", None),
    ("6600", "Depreciation - Vessels", X, "Operating Expense", "Depreciation & Amortization", None),
    ("6700", "Bank Charges & Fees Expense", X, "Operating Expense", "Other Operating Expenses", None),
    ("6710", "Credit Card Processing Fees", X, "Operating Expense", "Other Operating Expenses", None),
    ("6790", "Other Operating Expenses", X, "Operating Expense", "Other Operating Expenses", None),
    ("7000", "Interest Expense - Bank Loans", X, "Finance Costs", "Finance Costs", None),
    ("7100", "Foreign Exchange Losses", X, "Non-Operating Expense", "Non-Operating Expenses", None),
]
