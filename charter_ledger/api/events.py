"""
Business event endpoints.

Each endpoint journalizes one business document. Re-sending the
same document is safe: the response is 200 with skipped=true and
the existing entry, instead of 201 with a new one.
"""

from fastapi import APIRouter, Depends, Header, Response
from sqlalchemy.orm import Session

from charter_ledger.models.base import get_db
from charter_ledger.services.posting_service import JournalPostingService
from charter_ledger.schemas.events import (
    ExpenseApprovalData,
    ExpensePaymentData,
    GatewaySettlementData,
    OpeningBalanceData,
    ReceiptData,
    RevenueRecognitionData,
)
from charter_ledger.schemas.journal import PostingResult
from charter_ledger.api.errors import raise_for_result

router = APIRouter(prefix="/events", tags=["Business Events"])


def _respond(db: Session, response: Response, result: PostingResult) -> PostingResult:
    if not result.success:
        db.rollback()
        raise_for_result(result)
    db.commit()
    if result.skipped:
        response.status_code = 200
    return result


@router.post("/expense-approved", response_model=PostingResult, status_code=201)
def expense_approved(
    data: ExpenseApprovalData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    result = JournalPostingService(db).post_expense_approval(data, user)
    return _respond(db, response, result)


@router.post("/expense-paid", response_model=PostingResult, status_code=201)
def expense_paid(
    data: ExpensePaymentData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    result = JournalPostingService(db).post_expense_payment(data, user)
    return _respond(db, response, result)


@router.post("/receipt-received", response_model=PostingResult, status_code=201)
def receipt_received(
    data: ReceiptData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    result = JournalPostingService(db).post_receipt(data, user)
    return _respond(db, response, result)


@router.post("/gateway-settlement", response_model=PostingResult, status_code=201)
def gateway_settlement(
    data: GatewaySettlementData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    result = JournalPostingService(db).post_gateway_settlement(data, user)
    return _respond(db, response, result)


@router.post("/revenue-recognized", response_model=PostingResult, status_code=201)
def revenue_recognized(
    data: RevenueRecognitionData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    """Release a charter deposit into revenue."""
    result = JournalPostingService(db).post_revenue_recognition(data, user)
    return _respond(db, response, result)


@router.post("/opening-balance", response_model=PostingResult, status_code=201)
def opening_balance(
    data: OpeningBalanceData,
    response: Response,
    user: str = Header(alias="X-User"),
    db: Session = Depends(get_db),
):
    result = JournalPostingService(db).post_opening_balance(data, user)
    return _respond(db, response, result)
