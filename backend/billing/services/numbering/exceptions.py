"""Numbering domain exceptions."""

from billing.services.exceptions import NotFoundError, ServiceError, ValidationError


class InvalidSeriesKey(ValidationError):
    """Series key is empty or malformed. Raised before any store access."""

    pass


class InvalidSequenceNumber(ValidationError):
    """Sequence number is not a positive integer."""

    pass


class InvalidDocumentNumber(ValidationError):
    """Formatted document number cannot be parsed."""

    pass


class OrganizationNotFound(NotFoundError):
    """Organization not found."""

    pass


class TransientAllocationConflict(ServiceError):
    """Allocation kept losing races until the retry ceiling was reached.

    Retryable: the caller may repeat the whole allocation after a short delay.
    """

    def __init__(self, series_key: str, attempts: int):
        self.series_key = series_key
        self.attempts = attempts
        super().__init__(f"Could not reserve a number in series {series_key!r} after {attempts} attempts")


class StoreUnavailable(ServiceError):
    """The sequence store is unreachable or failing.

    The original error is chained as __cause__.
    """

    pass


class NumberAlreadyReserved(ServiceError):
    """A caller-chosen number is already held by another document."""

    def __init__(self, series_key: str, number: int):
        self.series_key = series_key
        self.number = number
        super().__init__(f"Number {number} in series {series_key!r} is already reserved")
