"""Series keys: the identity of an independently numbered stream."""

from dataclasses import dataclass

from billing.models.sequence_reservation import SERIES_KEY_MAX_LENGTH
from billing.services.numbering.exceptions import InvalidSeriesKey

SERIES_KEY_SEPARATOR = ":"


def validate_series_key(series_key: object) -> str:
    """Return ``series_key`` if it is usable as a store key.

    The allocator does not interpret the key; it only rejects values that
    cannot identify a stream (non-strings, blank, too long for the store).
    """
    if not isinstance(series_key, str):
        raise InvalidSeriesKey(f"Series key must be a string, got {type(series_key).__name__}")
    if not series_key.strip():
        raise InvalidSeriesKey("Series key must not be empty")
    if len(series_key) > SERIES_KEY_MAX_LENGTH:
        raise InvalidSeriesKey(f"Series key longer than {SERIES_KEY_MAX_LENGTH} characters")
    return series_key


def _check_component(name: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidSeriesKey(f"Series {name} must not be empty")
    if SERIES_KEY_SEPARATOR in value:
        raise InvalidSeriesKey(f"Series {name} must not contain {SERIES_KEY_SEPARATOR!r}: {value!r}")


@dataclass(frozen=True)
class SeriesKey:
    """Tenant + document type + optional sub-scope (fiscal year, branch, ...).

    Usage:
        key = SeriesKey("org_01", "invoice", "24-25")
        key.to_str()  # "org_01:invoice:24-25"
        SeriesKey.parse("org_01:invoice:24-25") == key
    """

    tenant_id: str
    document_type: str
    sub_scope: str | None = None

    def __post_init__(self) -> None:
        _check_component("tenant id", self.tenant_id)
        _check_component("document type", self.document_type)
        if self.sub_scope is not None:
            _check_component("sub-scope", self.sub_scope)

    def to_str(self) -> str:
        parts = [self.tenant_id, self.document_type]
        if self.sub_scope is not None:
            parts.append(self.sub_scope)
        return validate_series_key(SERIES_KEY_SEPARATOR.join(parts))

    def __str__(self) -> str:
        return self.to_str()

    @classmethod
    def parse(cls, value: str) -> "SeriesKey":
        """Parse the canonical string form back into its components."""
        validate_series_key(value)
        parts = value.split(SERIES_KEY_SEPARATOR)
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        if len(parts) == 3:
            return cls(parts[0], parts[1], parts[2])
        raise InvalidSeriesKey(f"Series key must have 2 or 3 components: {value!r}")
