"""Display prefix fixed per document series."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlmodel import Field, SQLModel

from billing.models.fields import utc_now
from billing.models.sequence_reservation import SERIES_KEY_MAX_LENGTH


class SeriesPrefix(SQLModel, table=True):
    """Prefix a document series was opened with.

    Written together with the first number of the series. Later changes to the
    organization's prefix apply to new series only, so every number of one
    series carries the same prefix.
    """

    __tablename__ = "series_prefixes"

    series_key: str = Field(sa_column=Column(String(SERIES_KEY_MAX_LENGTH), primary_key=True))
    prefix: str = Field(max_length=10)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
