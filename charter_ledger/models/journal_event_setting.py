"""
Per-company journal event settings.

Controls, for each business event type, whether journals are
generated at all, whether they are posted immediately, and which
accounts replace the system defaults.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from charter_ledger.models.base import Base
from charter_ledger.models.enums import EventType


class JournalEventSetting(Base):
    __tablename__ = "journal_event_settings"
    __table_args__ = (
        UniqueConstraint(
            "company_id", "event_type",
            name="uq_journal_event_settings_company_event",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event_type: Mapped[EventType] = mapped_column(
        SAEnum(EventType, name="event_type_enum", create_constraint=True),
        nullable=False,
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_post: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    default_debit_account: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    default_credit_account: Mapped[str | None] = mapped_column(
        String(20), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<JournalEventSetting {self.company_id} {self.event_type.value} "
            f"auto_post={self.auto_post}>"
        )
