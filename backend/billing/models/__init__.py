"""Database models."""

from sqlmodel import SQLModel

from billing.models.organization import Organization
from billing.models.sequence_reservation import (
    SEQUENCE_RESERVATION_CONSTRAINT,
    SERIES_KEY_MAX_LENGTH,
    SequenceReservation,
)
from billing.models.series_prefix import SeriesPrefix

__all__ = [
    "SQLModel",
    "Organization",
    "SequenceReservation",
    "SeriesPrefix",
    "SEQUENCE_RESERVATION_CONSTRAINT",
    "SERIES_KEY_MAX_LENGTH",
]
