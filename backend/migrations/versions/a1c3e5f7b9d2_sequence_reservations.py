"""sequence_reservations

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 10:12:31.402118

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b9d2"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("invoice_prefix", sa.String(length=10), nullable=False, server_default="INV"),
        sa.Column("fiscal_year_start", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Reserved document numbers; the unique constraint decides concurrent allocations
    op.create_table(
        "sequence_reservations",
        sa.Column("id", sa.String(length=26), nullable=False),
        sa.Column("series_key", sa.String(length=255), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("document_ref", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("series_key", "number", name="uq_sequence_reservation_series_number"),
    )
    op.create_index(
        op.f("ix_sequence_reservations_series_key"),
        "sequence_reservations",
        ["series_key"],
        unique=False,
    )

    # Prefix fixed when a document series issues its first number
    op.create_table(
        "series_prefixes",
        sa.Column("series_key", sa.String(length=255), nullable=False),
        sa.Column("prefix", sa.String(length=10), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("series_key"),
    )


def downgrade() -> None:
    op.drop_table("series_prefixes")
    op.drop_index(op.f("ix_sequence_reservations_series_key"), table_name="sequence_reservations")
    op.drop_table("sequence_reservations")
    op.drop_table("organizations")
