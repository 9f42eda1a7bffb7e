"""Organization document numbering endpoints."""

import structlog
from fastapi import APIRouter, Response

from billing.api.v1.dependencies import DocumentNumberingServiceDep
from billing.api.v1.documents.schemas import ClaimNumberRequest, DocumentNumberResponse, GenerateNumberRequest
from billing.api.v1.errors import http_error
from billing.services.exceptions import ServiceError
from billing.services.numbering.document_numbering import DocumentType

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["documents"])


@router.get(
    "/organizations/{org_id}/documents/{document_type}/next-number",
    response_model=DocumentNumberResponse,
    operation_id="previewDocumentNumber",
)
async def preview_document_number(
    org_id: str,
    document_type: DocumentType,
    service: DocumentNumberingServiceDep,
) -> DocumentNumberResponse:
    """Preview the number the next document of this type would get."""
    try:
        document_number = await service.preview_next_number(org_id, document_type)
    except ServiceError as e:
        raise http_error(e)
    return DocumentNumberResponse(document_number=document_number)


@router.post(
    "/organizations/{org_id}/documents/{document_type}/numbers",
    response_model=DocumentNumberResponse,
    status_code=201,
    operation_id="generateDocumentNumber",
)
async def generate_document_number(
    org_id: str,
    document_type: DocumentType,
    request: GenerateNumberRequest,
    service: DocumentNumberingServiceDep,
) -> DocumentNumberResponse:
    """Reserve the next document number of the current fiscal year."""
    try:
        document_number = await service.generate_number(org_id, document_type, document_ref=request.document_ref)
    except ServiceError as e:
        raise http_error(e)
    return DocumentNumberResponse(document_number=document_number)


@router.post(
    "/organizations/{org_id}/documents/{document_type}/numbers/claim",
    response_model=DocumentNumberResponse,
    status_code=201,
    operation_id="claimDocumentNumber",
)
async def claim_document_number(
    org_id: str,
    document_type: DocumentType,
    request: ClaimNumberRequest,
    service: DocumentNumberingServiceDep,
) -> DocumentNumberResponse:
    """Reserve a manually entered or imported document number."""
    try:
        document_number = await service.claim_number(
            org_id,
            request.document_number,
            document_type,
            document_ref=request.document_ref,
        )
    except ServiceError as e:
        raise http_error(e)
    return DocumentNumberResponse(document_number=document_number)


@router.delete(
    "/organizations/{org_id}/documents/{document_type}/numbers/{document_number}",
    status_code=204,
    operation_id="releaseDocumentNumber",
)
async def release_document_number(
    org_id: str,
    document_type: DocumentType,
    document_number: str,
    service: DocumentNumberingServiceDep,
) -> Response:
    """Release the number of a deleted or voided document."""
    try:
        await service.release_number(org_id, document_number, document_type)
    except ServiceError as e:
        raise http_error(e)
    logger.info("Document number released via API", org_id=org_id, document_number=document_number)
    return Response(status_code=204)
