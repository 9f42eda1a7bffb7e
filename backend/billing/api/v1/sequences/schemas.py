"""API schemas for sequence endpoints."""

from pydantic import BaseModel, Field

# =============================================================================
# Request Schemas
# =============================================================================


class AllocateRequest(BaseModel):
    """Request to reserve the next number of a series."""

    series_key: str
    document_ref: str | None = Field(default=None, max_length=255)


class ClaimRequest(BaseModel):
    """Request to reserve a specific number, e.g. for an imported document."""

    series_key: str
    number: int
    document_ref: str | None = Field(default=None, max_length=255)


# =============================================================================
# Response Schemas
# =============================================================================


class SequenceNumberResponse(BaseModel):
    """A single number within a series (allocated or previewed)."""

    series_key: str
    number: int


class ReservedNumbersResponse(BaseModel):
    """Reserved numbers of a series, ascending."""

    series_key: str
    numbers: list[int]


class ReservationResponse(BaseModel):
    """A reserved number and the document holding it (null if unattributed)."""

    series_key: str
    number: int
    document_ref: str | None

