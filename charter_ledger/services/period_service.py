"""
Financial period guard and administration.

Periods are calendar months keyed "YYYY-MM" per company. A month
with no stored row is open. Closed and locked months reject any
journal write dated inside them; a locked month can never be
reopened.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.exceptions import PeriodClosedError, PeriodStateError
from charter_ledger.models.enums import PeriodStatus
from charter_ledger.models.financial_period import FinancialPeriod

logger = logging.getLogger(__name__)


def period_key(value: date) -> str:
    return value.strftime("%Y-%m")


class PeriodService:

    def __init__(self, db: Session):
        self.db = db

    def get_period(self, company_id: str, period: str) -> FinancialPeriod | None:
        return self.db.execute(
            select(FinancialPeriod).where(
                FinancialPeriod.company_id == company_id,
                FinancialPeriod.period == period,
            )
        ).scalar_one_or_none()

    def get_status(self, company_id: str, period: str) -> PeriodStatus:
        record = self.get_period(company_id, period)
        return record.status if record else PeriodStatus.OPEN

    def is_open(self, company_id: str, entry_date: date) -> bool:
        return self.get_status(company_id, period_key(entry_date)) == PeriodStatus.OPEN

    def assert_open(self, company_id: str, entry_date: date) -> None:
        """Raise PeriodClosedError unless the month of entry_date is open."""
        period = period_key(entry_date)
        if self.get_status(company_id, period) != PeriodStatus.OPEN:
            logger.warning(
                "Rejected journal write for company %s: period %s is closed",
                company_id, period,
            )
            raise PeriodClosedError(company_id, period)

    def list_periods(self, company_id: str) -> list[FinancialPeriod]:
        periods = self.db.execute(
            select(FinancialPeriod)
            .where(FinancialPeriod.company_id == company_id)
            .order_by(FinancialPeriod.period)
        ).scalars().all()
        return list(periods)

    def close_period(
        self, company_id: str, period: str, closed_by: str, notes: str | None = None
    ) -> FinancialPeriod:
        record = self._get_or_create(company_id, period)
        if record.status == PeriodStatus.LOCKED:
            raise PeriodStateError(f"Period {period} is locked")
        record.status = PeriodStatus.CLOSED
        record.closed_by = closed_by
        record.closed_at = datetime.utcnow()
        record.notes = notes
        self.db.flush()
        logger.info("Closed period %s for company %s by %s", period, company_id, closed_by)
        return record

    def reopen_period(self, company_id: str, period: str) -> FinancialPeriod:
        record = self._get_or_create(company_id, period)
        if record.status == PeriodStatus.LOCKED:
            raise PeriodStateError(f"Period {period} is locked and cannot be reopened")
        record.status = PeriodStatus.OPEN
        record.closed_by = None
        record.closed_at = None
        self.db.flush()
        logger.info("Reopened period %s for company %s", period, company_id)
        return record

    def lock_period(
        self, company_id: str, period: str, closed_by: str, notes: str | None = None
    ) -> FinancialPeriod:
        """Lock a period permanently. Open periods are closed and locked in one step."""
        record = self._get_or_create(company_id, period)
        record.status = PeriodStatus.LOCKED
        if record.closed_at is None:
            record.closed_by = closed_by
            record.closed_at = datetime.utcnow()
        if notes is not None:
            record.notes = notes
        self.db.flush()
        logger.info("Locked period %s for company %s by %s", period, company_id, closed_by)
        return record

    def _get_or_create(self, company_id: str, period: str) -> FinancialPeriod:
        record = self.get_period(company_id, period)
        if record is None:
            record = FinancialPeriod(
                company_id=company_id, period=period, status=PeriodStatus.OPEN
            )
            self.db.add(record)
        return record
