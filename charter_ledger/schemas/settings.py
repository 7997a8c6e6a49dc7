"""Schemas for per-company configuration: event settings, bank accounts, periods."""

from datetime import datetime

from pydantic import BaseModel, Field

from charter_ledger.models.enums import EventType, PeriodStatus

PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class EventSettingUpdate(BaseModel):
    is_enabled: bool = True
    auto_post: bool = False
    default_debit_account: str | None = Field(default=None, max_length=20)
    default_credit_account: str | None = Field(default=None, max_length=20)


class EventSettingResponse(BaseModel):
    company_id: str
    event_type: EventType
    is_enabled: bool
    auto_post: bool
    default_debit_account: str | None
    default_credit_account: str | None

    model_config = {"from_attributes": True}


class BankAccountCreate(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    company_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=150)
    currency: str = Field(min_length=3, max_length=3)
    gl_account_code: str | None = Field(default=None, max_length=20)


class BankAccountResponse(BaseModel):
    id: str
    company_id: str
    name: str
    currency: str
    gl_account_code: str | None
    is_active: bool

    model_config = {"from_attributes": True}


class PeriodCloseRequest(BaseModel):
    closed_by: str = Field(min_length=1, max_length=100)
    notes: str | None = Field(default=None, max_length=500)


class FinancialPeriodResponse(BaseModel):
    company_id: str
    period: str
    status: PeriodStatus
    closed_by: str | None
    closed_at: datetime | None
    notes: str | None

    model_config = {"from_attributes": True}
