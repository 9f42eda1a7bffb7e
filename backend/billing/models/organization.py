"""Organization (tenant) model."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from billing.models.fields import new_ulid, utc_now


class Organization(SQLModel, table=True):
    """Tenant whose documents are numbered.

    Only the fields document numbering depends on live here.
    """

    __tablename__ = "organizations"

    id: str = Field(default_factory=new_ulid, primary_key=True, max_length=26)
    name: str
    invoice_prefix: str = Field(default="INV", max_length=10)
    fiscal_year_start: int = Field(default=4, ge=1, le=12)  # Month the fiscal year starts (4 = April)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
