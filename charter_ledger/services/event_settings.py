"""
Per-company journal event settings.

No stored row means the defaults: enabled, saved as draft, and the
system default accounts.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from charter_ledger.models.enums import EventType
from charter_ledger.models.journal_event_setting import JournalEventSetting
from charter_ledger.schemas.settings import EventSettingUpdate


class EventSettingsService:

    def __init__(self, db: Session):
        self.db = db

    def get(self, company_id: str, event_type: EventType) -> JournalEventSetting | None:
        return self.db.execute(
            select(JournalEventSetting).where(
                JournalEventSetting.company_id == company_id,
                JournalEventSetting.event_type == event_type,
            )
        ).scalar_one_or_none()

    def list_for_company(self, company_id: str) -> list[JournalEventSetting]:
        settings = self.db.execute(
            select(JournalEventSetting)
            .where(JournalEventSetting.company_id == company_id)
            .order_by(JournalEventSetting.event_type)
        ).scalars().all()
        return list(settings)

    def upsert(
        self, company_id: str, event_type: EventType, request: EventSettingUpdate
    ) -> JournalEventSetting:
        setting = self.get(company_id, event_type)
        if setting is None:
            setting = JournalEventSetting(company_id=company_id, event_type=event_type)
            self.db.add(setting)
        setting.is_enabled = request.is_enabled
        setting.auto_post = request.auto_post
        setting.default_debit_account = request.default_debit_account
        setting.default_credit_account = request.default_credit_account
        self.db.flush()
        return setting

    def is_event_enabled(self, company_id: str, event_type: EventType) -> bool:
        setting = self.get(company_id, event_type)
        return setting.is_enabled if setting else True

    def should_auto_post(self, company_id: str, event_type: EventType) -> bool:
        setting = self.get(company_id, event_type)
        return setting.auto_post if setting else False

    def get_default_accounts(
        self, company_id: str, event_type: EventType
    ) -> tuple[str | None, str | None]:
        """Return (default_debit_account, default_credit_account) overrides."""
        setting = self.get(company_id, event_type)
        if setting is None:
            return None, None
        return setting.default_debit_account, setting.default_credit_account
