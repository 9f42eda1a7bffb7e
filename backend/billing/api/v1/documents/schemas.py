"""API schemas for document numbering endpoints."""

from pydantic import BaseModel, Field


class GenerateNumberRequest(BaseModel):
    """Request to reserve a document number for a new document."""

    document_ref: str | None = Field(default=None, max_length=255)


class DocumentNumberResponse(BaseModel):
    """Formatted document number, e.g. INV-24-25-00001."""

    document_number: str


class ClaimNumberRequest(BaseModel):
    """Request to reserve a number entered by the user or imported."""

    document_number: str = Field(max_length=64)
    document_ref: str | None = Field(default=None, max_length=255)
