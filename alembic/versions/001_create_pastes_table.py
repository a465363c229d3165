"""Create pastes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `pastes` table. See pastebin/models/paste.py for column docs.

Rollback: downgrade() drops the table (all pastes are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pastes",
        sa.Column(
            "id",
            sa.String(32),
            nullable=False,
            comment="Short generated identifier, also used as cache key and URL path",
        ),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When this paste was created (UTC)",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Paste body",
        ),
        sa.Column(
            "email",
            sa.String(320),
            nullable=False,
            comment="Identity of the creator; only this identity may delete the paste",
        ),
        sa.Column(
            "title",
            sa.String(255),
            nullable=False,
            server_default=sa.text("''"),
            comment="Optional display label",
        ),
        sa.Column(
            "language",
            sa.String(64),
            nullable=False,
            server_default=sa.text("''"),
            comment="Optional language hint",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Archive query: ORDER BY timestamp DESC
    op.create_index(
        "idx_pastes_timestamp",
        "pastes",
        [sa.text("timestamp DESC")],
    )
    op.create_index("ix_pastes_email", "pastes", ["email"])


def downgrade() -> None:
    op.drop_index("ix_pastes_email", table_name="pastes")
    op.drop_index("idx_pastes_timestamp", table_name="pastes")
    op.drop_table("pastes")
