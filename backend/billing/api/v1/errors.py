"""Conversion of service exceptions to HTTP errors."""

from fastapi import HTTPException

from billing.services.exceptions import NotFoundError, ServiceError, ValidationError
from billing.services.numbering.exceptions import (
    NumberAlreadyReserved,
    StoreUnavailable,
    TransientAllocationConflict,
)


def http_error(exc: ServiceError) -> HTTPException:
    """Map a service exception to the HTTPException the route should raise."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc) or "Not found")
    if isinstance(exc, NumberAlreadyReserved):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, TransientAllocationConflict):
        # Retryable: the series was contended, not broken
        return HTTPException(status_code=409, detail=str(exc), headers={"Retry-After": "1"})
    if isinstance(exc, StoreUnavailable):
        return HTTPException(status_code=503, detail="Sequence store unavailable")
    return HTTPException(status_code=500, detail="Internal error")
