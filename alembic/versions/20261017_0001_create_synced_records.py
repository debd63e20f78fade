"""create synced_records table

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "synced_records",
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False, comment="Upstream record id"),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=False),
            nullable=False,
            comment="Upstream creation time, zone-naive",
        ),
        sa.Column("state", sa.String(length=32), nullable=False),
        sa.Column("source_url", sa.String(length=2048), nullable=False),
        sa.Column(
            "origin",
            sa.String(length=255),
            nullable=False,
            comment="Upstream resource the record came from",
        ),
        sa.Column("synced_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_synced_records_origin", "synced_records", ["origin"], unique=False)
    op.create_index("ix_synced_records_created_at", "synced_records", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_synced_records_created_at", table_name="synced_records")
    op.drop_index("ix_synced_records_origin", table_name="synced_records")
    op.drop_table("synced_records")
