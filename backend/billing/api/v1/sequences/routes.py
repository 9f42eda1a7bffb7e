"""Raw sequence allocation endpoints."""

from fastapi import APIRouter, Response

from billing.api.v1.dependencies import AllocatorDep
from billing.api.v1.errors import http_error
from billing.api.v1.sequences.schemas import (
    AllocateRequest,
    ClaimRequest,
    ReservationResponse,
    ReservedNumbersResponse,
    SequenceNumberResponse,
)
from billing.services.exceptions import ServiceError

router = APIRouter(tags=["sequences"])


@router.post(
    "/sequences/allocate",
    response_model=SequenceNumberResponse,
    status_code=201,
    operation_id="allocateSequenceNumber",
)
async def allocate_number(
    request: AllocateRequest,
    allocator: AllocatorDep,
) -> SequenceNumberResponse:
    """Reserve the lowest free number of a series."""
    try:
        number = await allocator.allocate_next(request.series_key, document_ref=request.document_ref)
    except ServiceError as e:
        raise http_error(e)
    return SequenceNumberResponse(series_key=request.series_key, number=number)


@router.post(
    "/sequences/claim",
    response_model=SequenceNumberResponse,
    status_code=201,
    operation_id="claimSequenceNumber",
)
async def claim_number(
    request: ClaimRequest,
    allocator: AllocatorDep,
) -> SequenceNumberResponse:
    """Reserve a number chosen by the caller. 409 if it is already taken."""
    try:
        await allocator.claim(request.series_key, request.number, document_ref=request.document_ref)
    except ServiceError as e:
        raise http_error(e)
    return SequenceNumberResponse(series_key=request.series_key, number=request.number)


@router.get(
    "/sequences/{series_key:path}/next",
    response_model=SequenceNumberResponse,
    operation_id="previewSequenceNumber",
)
async def preview_number(
    series_key: str,
    allocator: AllocatorDep,
) -> SequenceNumberResponse:
    """Number the next allocation would get. Nothing is reserved."""
    try:
        number = await allocator.peek_next(series_key)
    except ServiceError as e:
        raise http_error(e)
    return SequenceNumberResponse(series_key=series_key, number=number)


@router.get(
    "/sequences/{series_key:path}/reserved",
    response_model=ReservedNumbersResponse,
    operation_id="listReservedNumbers",
)
async def list_reserved(
    series_key: str,
    allocator: AllocatorDep,
) -> ReservedNumbersResponse:
    """List reserved numbers of a series."""
    try:
        numbers = await allocator.list_reserved(series_key)
    except ServiceError as e:
        raise http_error(e)
    return ReservedNumbersResponse(series_key=series_key, numbers=numbers)


@router.delete(
    "/sequences/{series_key:path}/reservations/{number}",
    status_code=204,
    operation_id="releaseSequenceNumber",
)
async def release_number(
    series_key: str,
    number: int,
    allocator: AllocatorDep,
) -> Response:
    """Release a reserved number. Releasing a free number succeeds as well."""
    try:
        await allocator.release(series_key, number)
    except ServiceError as e:
        raise http_error(e)
    return Response(status_code=204)


@router.get(
    "/sequences/{series_key:path}/reservations/{number}",
    response_model=ReservationResponse,
    operation_id="getReservation",
)
async def get_reservation(
    series_key: str,
    number: int,
    allocator: AllocatorDep,
) -> ReservationResponse:
    """Show which document holds a number."""
    try:
        document_ref = await allocator.document_ref(series_key, number)
    except ServiceError as e:
        raise http_error(e)
    return ReservationResponse(series_key=series_key, number=number, document_ref=document_ref)
