"""Month and fiscal-year helpers shared by the periodic reports."""

import re
from datetime import date, timedelta

from charter_ledger.config import get_settings

FISCAL_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{4})$")


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def month_label(value: date) -> str:
    return value.strftime("%b %Y")


def month_end(first_day: date) -> date:
    following = date(first_day.year + first_day.month // 12, first_day.month % 12 + 1, 1)
    return following - timedelta(days=1)


def months_between(date_from: date, date_to: date) -> list[date]:
    """First day of every month from date_from to date_to, inclusive."""
    months = []
    current = date(date_from.year, date_from.month, 1)
    while current <= date_to:
        months.append(current)
        current = date(current.year + current.month // 12, current.month % 12 + 1, 1)
    return months


def fiscal_year_for(value: date, start_month: int | None = None) -> str:
    start_month = start_month or get_settings().FISCAL_YEAR_START_MONTH
    start_year = value.year if value.month >= start_month else value.year - 1
    return f"{start_year}-{start_year + 1}"


def fiscal_months(fiscal_year: str, start_month: int | None = None) -> list[date]:
    """
    The twelve months of a fiscal year such as "2024-2025".

    With the default November start this is Nov 2024 to Oct 2025.
    """
    match = FISCAL_YEAR_PATTERN.match(fiscal_year)
    if not match or int(match.group(2)) != int(match.group(1)) + 1:
        raise ValueError(f"Invalid fiscal year '{fiscal_year}', expected YYYY-YYYY")
    start_month = start_month or get_settings().FISCAL_YEAR_START_MONTH
    first = date(int(match.group(1)), start_month, 1)
    return months_between(first, date(first.year + 1, first.month, 1) - timedelta(days=1))
