"""Map service exceptions onto HTTP errors."""

from fastapi import HTTPException

from ppc_contracts.db.repository import InvalidTransition
from ppc_contracts.services.signing import (
    InvalidSignature,
    InvalidState,
    NotFound,
    SigningError,
    SlotAlreadySigned,
    StoreUnavailable,
)
from ppc_contracts.storage.contracts import StorageError

_STATUS_CODES = {
    NotFound: 404,
    InvalidState: 409,
    SlotAlreadySigned: 409,
    InvalidSignature: 422,
    StoreUnavailable: 503,
}


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StorageError):
        return HTTPException(status_code=503, detail="Storage unavailable")
    if isinstance(exc, SigningError):
        for error_type, status_code in _STATUS_CODES.items():
            if isinstance(exc, error_type):
                return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail="Internal error")


__all__ = ["http_error"]
