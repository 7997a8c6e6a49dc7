"""
Financial period model.

One row per company per calendar month ("YYYY-MM"). A month with
no row is open.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from charter_ledger.models.base import Base
from charter_ledger.models.enums import PeriodStatus


class FinancialPeriod(Base):
    __tablename__ = "financial_periods"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "period", name="uq_financial_periods_company_period"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    period: Mapped[str] = mapped_column(String(7), nullable=False)
    status: Mapped[PeriodStatus] = mapped_column(
        SAEnum(PeriodStatus, name="period_status_enum", create_constraint=True),
        nullable=False,
        default=PeriodStatus.OPEN,
    )
    closed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<FinancialPeriod {self.company_id} {self.period} ({self.status.value})>"
