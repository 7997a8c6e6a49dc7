"""
Mapping from ledger error codes to HTTP status codes.

Routers call raise_for_result() on a failed PostingResult, and
http_error() on a LedgerError raised by an administrative service.
"""

from fastapi import HTTPException

from charter_ledger.exceptions import LedgerError
from charter_ledger.schemas.journal import PostingResult

STATUS_BY_CODE = {
    "INVALID_ENTRY": 400,
    "UNKNOWN_ACCOUNT_CODE": 400,
    "ENTRY_NOT_FOUND": 404,
    "ACCOUNT_NOT_FOUND": 404,
    "ALREADY_POSTED": 409,
    "REFERENCE_NUMBER_CONFLICT": 409,
    "INVALID_PERIOD_STATE": 409,
    "YEAR_END_NOT_READY": 409,
    "PERIOD_CLOSED": 422,
    "UNBALANCED": 422,
    "POSTING_FAILED": 500,
}


def raise_for_result(result: PostingResult) -> None:
    if not result.success:
        raise HTTPException(
            status_code=STATUS_BY_CODE.get(result.error_code, 400),
            detail={"code": result.error_code, "message": result.error},
        )


def http_error(error: LedgerError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_CODE.get(error.code, 400),
        detail={"code": error.code, "message": error.message},
    )
