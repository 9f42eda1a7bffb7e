"""Organization-aware document numbering.

Builds one series per organization, document type and fiscal year, and turns
allocated sequence numbers into display numbers such as ``INV-24-25-00001``.
"""

from datetime import date
from enum import StrEnum

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from billing.config import settings
from billing.models.organization import Organization
from billing.models.series_prefix import SeriesPrefix
from billing.services.numbering.allocator import SequenceAllocator
from billing.services.numbering.exceptions import InvalidDocumentNumber, OrganizationNotFound
from billing.services.numbering.formatting import fiscal_year_label, format_document_number, parse_document_number
from billing.services.numbering.series import SeriesKey
from billing.utils.datetime_utils import business_today

logger = structlog.get_logger(__name__)


class DocumentType(StrEnum):
    """Documents that carry a statutory number."""

    INVOICE = "invoice"
    CREDIT_NOTE = "credit_note"
    PROFORMA = "proforma"
    QUOTATION = "quotation"
    PURCHASE_ORDER = "purchase_order"


DEFAULT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.INVOICE: "INV",
    DocumentType.CREDIT_NOTE: "CN",
    DocumentType.PROFORMA: "PI",
    DocumentType.QUOTATION: "QT",
    DocumentType.PURCHASE_ORDER: "PO",
}


class DocumentNumberingService:
    """Service for generating, claiming and releasing document numbers of an organization.

    The prefix of a series is fixed when its first number is issued or
    claimed (``series_prefixes`` table). Changing the organization's prefix
    affects series opened afterwards, typically the next fiscal year.

    Note: The allocator commits reservations on its own and fixing a series
    prefix commits this session. Callers creating the document in this
    session must release the number if that creation fails.
    """

    def __init__(self, session: AsyncSession, allocator: SequenceAllocator):
        self.session = session
        self.allocator = allocator

    async def get_organization(self, org_id: str) -> Organization:
        organization = await self.session.get(Organization, org_id)
        if organization is None:
            raise OrganizationNotFound()
        return organization

    def prefix_for(self, organization: Organization, document_type: DocumentType) -> str:
        """Prefix the organization currently configures for new series."""
        if document_type == DocumentType.INVOICE:
            return organization.invoice_prefix or settings.default_invoice_prefix
        return DEFAULT_PREFIXES[document_type]

    def series_for(
        self,
        organization: Organization,
        document_type: DocumentType,
        today: date | None = None,
    ) -> SeriesKey:
        """Series of the fiscal year containing ``today`` (business timezone by default)."""
        fiscal_year = fiscal_year_label(
            today or business_today(),
            organization.fiscal_year_start or settings.default_fiscal_year_start,
        )
        return SeriesKey(organization.id, document_type.value, fiscal_year)

    async def series_prefix(self, series: SeriesKey) -> str | None:
        """Prefix fixed for the series, None while it has issued no number."""
        pinned = await self.session.get(SeriesPrefix, series.to_str())
        return pinned.prefix if pinned is not None else None

    async def preview_next_number(
        self,
        org_id: str,
        document_type: DocumentType = DocumentType.INVOICE,
        today: date | None = None,
    ) -> str:
        """Display number the next document would get, without reserving it."""
        organization = await self.get_organization(org_id)
        series = self.series_for(organization, document_type, today)
        prefix = await self.series_prefix(series) or self.prefix_for(organization, document_type)
        number = await self.allocator.peek_next(series.to_str())
        return self._format(prefix, series, number)

    async def generate_number(
        self,
        org_id: str,
        document_type: DocumentType = DocumentType.INVOICE,
        document_ref: str | None = None,
        today: date | None = None,
    ) -> str:
        """Reserve the lowest free number of the current fiscal year and format it."""
        organization = await self.get_organization(org_id)
        series = self.series_for(organization, document_type, today)
        prefix = await self._pin_prefix(series, self.prefix_for(organization, document_type))
        number = await self.allocator.allocate_next(series.to_str(), document_ref=document_ref)
        document_number = self._format(prefix, series, number)

        logger.info(
            "Generated document number",
            org_id=org_id,
            document_type=document_type.value,
            document_number=document_number,
            document_ref=document_ref,
        )
        return document_number

    async def claim_number(
        self,
        org_id: str,
        document_number: str,
        document_type: DocumentType = DocumentType.INVOICE,
        document_ref: str | None = None,
    ) -> str:
        """Reserve a number supplied by the caller (manual entry, imports).

        The number must carry the prefix of its series. Returns the number in
        canonical form, so ``ACM-24-25-7`` comes back as ``ACM-24-25-00007``.

        Raises:
            InvalidDocumentNumber: malformed number or foreign prefix
            NumberAlreadyReserved: another document holds the number
        """
        organization = await self.get_organization(org_id)
        prefix, fiscal_year, number = parse_document_number(document_number)
        series = SeriesKey(organization.id, document_type.value, fiscal_year)
        await self._check_prefix(prefix, series, self.prefix_for(organization, document_type))

        await self._pin_prefix(series, prefix)
        await self.allocator.claim(series.to_str(), number, document_ref=document_ref)
        canonical = self._format(prefix, series, number)

        logger.info(
            "Claimed document number",
            org_id=org_id,
            document_type=document_type.value,
            document_number=canonical,
            document_ref=document_ref,
        )
        return canonical

    async def release_number(
        self,
        org_id: str,
        document_number: str,
        document_type: DocumentType = DocumentType.INVOICE,
    ) -> None:
        """Free a number after its document was deleted or voided.

        The series is taken from the fiscal year embedded in the number, so
        numbers issued in an earlier fiscal year are released from that year.
        Releasing a number that is not reserved is a no-op.
        """
        organization = await self.get_organization(org_id)
        prefix, fiscal_year, number = parse_document_number(document_number)
        series = SeriesKey(organization.id, document_type.value, fiscal_year)
        await self._check_prefix(prefix, series, self.prefix_for(organization, document_type))

        await self.allocator.release(series.to_str(), number)

    async def _check_prefix(self, prefix: str, series: SeriesKey, current_prefix: str) -> None:
        expected = await self.series_prefix(series) or current_prefix
        if prefix != expected:
            raise InvalidDocumentNumber(
                f"Prefix {prefix!r} does not match prefix {expected!r} of series {series.to_str()!r}"
            )

    async def _pin_prefix(self, series: SeriesKey, prefix: str) -> str:
        """Fix ``prefix`` for the series unless an earlier number already fixed one."""
        series_key = series.to_str()
        pinned = await self.session.get(SeriesPrefix, series_key)
        if pinned is not None:
            return pinned.prefix

        self.session.add(SeriesPrefix(series_key=series_key, prefix=prefix))
        try:
            await self.session.commit()
        except IntegrityError:
            # Concurrent first number of the same series; its prefix wins
            await self.session.rollback()
            pinned = await self.session.get(SeriesPrefix, series_key)
            if pinned is None:
                raise
            return pinned.prefix

        logger.info("Fixed document series prefix", series_key=series_key, prefix=prefix)
        return prefix

    def _format(self, prefix: str, series: SeriesKey, number: int) -> str:
        assert series.sub_scope is not None
        return format_document_number(
            prefix,
            series.sub_scope,
            number,
            digits=settings.document_number_digits,
        )
