"""
Per-company configuration endpoints: journal event settings and
the bank account directory.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from charter_ledger.models.base import get_db
from charter_ledger.models.enums import EventType
from charter_ledger.services.bank_accounts import BankAccountService
from charter_ledger.services.event_settings import EventSettingsService
from charter_ledger.schemas.settings import (
    BankAccountCreate,
    BankAccountResponse,
    EventSettingResponse,
    EventSettingUpdate,
)

router = APIRouter(tags=["Settings"])


@router.get(
    "/companies/{company_id}/event-settings",
    response_model=list[EventSettingResponse],
)
def list_event_settings(company_id: str, db: Session = Depends(get_db)):
    """Stored settings only. Event types without a row use the defaults."""
    return EventSettingsService(db).list_for_company(company_id)


@router.put(
    "/companies/{company_id}/event-settings/{event_type}",
    response_model=EventSettingResponse,
)
def update_event_setting(
    company_id: str,
    event_type: EventType,
    request: EventSettingUpdate,
    db: Session = Depends(get_db),
):
    setting = EventSettingsService(db).upsert(company_id, event_type, request)
    db.commit()
    return setting


@router.post("/bank-accounts", response_model=BankAccountResponse, status_code=201)
def create_bank_account(request: BankAccountCreate, db: Session = Depends(get_db)):
    try:
        bank_account = BankAccountService(db).create(request)
        db.commit()
        return bank_account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/bank-accounts", response_model=list[BankAccountResponse])
def list_bank_accounts(company_id: str, db: Session = Depends(get_db)):
    return BankAccountService(db).list_for_company(company_id)
