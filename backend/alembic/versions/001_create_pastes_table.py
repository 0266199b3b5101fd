"""Create pastes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `pastes` table, the only table of the service.
How:   Same columns and defaults as pastebin/models/paste.py, which the app
       also creates on startup with CREATE TABLE IF NOT EXISTS semantics.

Rollback: downgrade() drops the table (destructive, all pastes lost).
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
    """Create the pastes table with all columns and defaults."""
    op.create_table(
        "pastes",

        # Millisecond timestamp rendered as text
        sa.Column(
            "id",
            sa.String(),
            nullable=False,
            comment="Creation time in milliseconds since the epoch, as text",
        ),

        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Paste body; immutable after creation",
        ),

        # NULL: never expires by time
        sa.Column(
            "expires_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Paste becomes unreadable after this instant (NULL: never)",
        ),

        # NULL: unlimited views
        sa.Column(
            "max_views",
            sa.Integer(),
            nullable=True,
            comment="Paste becomes unreadable once view_count reaches this (NULL: unlimited)",
        ),

        sa.Column(
            "view_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Number of successful reads",
        ),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="When this paste was created (UTC)",
        ),

        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the pastes table entirely."""
    op.drop_table("pastes")
