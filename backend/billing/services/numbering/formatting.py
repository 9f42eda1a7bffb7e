"""Fiscal year labels and display formats of document numbers."""

import re
from datetime import date

from billing.services.numbering.exceptions import InvalidDocumentNumber

# INV-24-25-00001
_DOCUMENT_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Za-z0-9]+)-(?P<fiscal_year>\d{2}-\d{2})-(?P<number>\d+)$")


def fiscal_year_label(today: date, start_month: int) -> str:
    """Return the fiscal year containing ``today`` as "YY-YY".

    A fiscal year starting in April (start_month=4) labels 2024-04-01 through
    2025-03-31 as "24-25".
    """
    if not 1 <= start_month <= 12:
        raise ValueError(f"Fiscal year start month must be 1..12, got {start_month}")
    if today.month >= start_month:
        start_year = today.year
    else:
        start_year = today.year - 1
    end_year = start_year + 1
    return f"{str(start_year)[-2:]}-{str(end_year)[-2:]}"


def format_document_number(prefix: str, fiscal_year: str, number: int, digits: int = 5) -> str:
    """Render e.g. ``INV-24-25-00001``. Numbers wider than ``digits`` are not truncated."""
    return f"{prefix}-{fiscal_year}-{number:0{digits}d}"


def parse_document_number(value: str) -> tuple[str, str, int]:
    """Split a formatted document number into (prefix, fiscal_year, number)."""
    match = _DOCUMENT_NUMBER_RE.match(value.strip())
    if not match:
        raise InvalidDocumentNumber(f"Not a document number: {value!r}")
    number = int(match.group("number"))
    if number < 1:
        raise InvalidDocumentNumber(f"Document number must be positive: {value!r}")
    return match.group("prefix"), match.group("fiscal_year"), number
