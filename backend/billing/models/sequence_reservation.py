"""Sequence reservation model backing the gap-filling number allocator."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from billing.models.fields import new_ulid, utc_now

SERIES_KEY_MAX_LENGTH = 255

# One live reservation per number within a series. Inserts racing for the same
# number are decided by this constraint.
SEQUENCE_RESERVATION_CONSTRAINT = UniqueConstraint(
    "series_key",
    "number",
    name="uq_sequence_reservation_series_number",
)


class SequenceReservation(SQLModel, table=True):
    """A number currently consumed by a document within one series.

    The set of consumed numbers of a series is exactly the set of rows with
    that series_key. Releasing a number deletes its row.
    """

    __tablename__ = "sequence_reservations"
    __table_args__ = (SEQUENCE_RESERVATION_CONSTRAINT,)

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    series_key: str = Field(sa_column=Column(String(SERIES_KEY_MAX_LENGTH), index=True, nullable=False))
    number: int
    document_ref: str | None = None  # Owning document (invoice id, ...)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
