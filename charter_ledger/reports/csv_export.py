"""CSV rendering of reports for download."""

import csv
import io

from charter_ledger.schemas.reports import (
    AgingReport,
    DrillDownRow,
    ProjectPLReport,
    TrialBalanceReport,
    VatSummaryReport,
)


def _render(header: list[str], rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def project_pl_csv(report: ProjectPLReport) -> str:
    return _render(
        ["Period", "Income", "Management Fee", "Expense", "Profit"],
        [
            [row.label, row.income, row.management_fee, row.expense, row.profit]
            for row in [*report.rows, report.total]
        ],
    )


def vat_summary_csv(report: VatSummaryReport) -> str:
    return _render(
        ["Period", "Input VAT", "Output VAT", "Net VAT", "Status"],
        [
            [row.label, row.input_vat, row.output_vat, row.net_vat, row.status.value]
            for row in [*report.rows, report.total]
        ],
    )


def drill_down_csv(rows: list[DrillDownRow]) -> str:
    return _render(
        ["Date", "Description", "Reference", "Category", "Amount"],
        [
            [row.entry_date.isoformat(), row.description, row.reference_number,
             row.category, row.amount]
            for row in rows
        ],
    )


def trial_balance_csv(report: TrialBalanceReport) -> str:
    rows = [
        [row.account_code, row.account_name, row.account_type.value, row.debit, row.credit]
        for row in report.rows
    ]
    rows.append(["", "Total", "", report.total_debit, report.total_credit])
    return _render(["Account", "Name", "Type", "Debit", "Credit"], rows)


def aging_csv(report: AgingReport) -> str:
    rows = [[bucket.label, bucket.count, bucket.amount] for bucket in report.buckets]
    rows.append(["Total", report.total_count, report.total_amount])
    return _render(["Bucket", "Count", "Amount"], rows)
