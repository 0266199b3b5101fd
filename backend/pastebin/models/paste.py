"""
Pastebin Backend: Paste SQLAlchemy Model
=========================================

What:  ORM model representing the `pastes` table.
How:   Inherits from the shared DeclarativeBase; the schema bootstrap and
       Alembic both read this table definition.
Who:   Used by PasteService for insert/select/update.

Table Design:
    - id: decimal string of the creation time in milliseconds. Two inserts
      in the same millisecond collide on the primary key; the second fails.
    - expires_at / max_views: NULL means "no limit" for that policy
    - view_count: only ever incremented, once per successful read
    - created_at: audit only, never read by the endpoints
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from pastebin.database import Base


class Paste(Base):
    """
    A stored text blob plus its access-policy metadata.

    Lifecycle:
        1. Inserted by POST /paste with view_count = 0
        2. Each successful GET /paste/{id} adds 1 to view_count
        3. Once expired (by time or views) the row stays in place, unreadable
    """

    __tablename__ = "pastes"

    id: Mapped[str] = mapped_column(
        String,
        primary_key=True,
        comment="Creation time in milliseconds since the epoch, as text",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Paste body; immutable after creation",
    )

    # Stored in UTC. SQLite drops tzinfo on round-trip; see PasteService._as_utc
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Paste becomes unreadable after this instant (NULL: never)",
    )

    max_views: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        default=None,
        comment="Paste becomes unreadable once view_count reaches this (NULL: unlimited)",
    )

    view_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Number of successful reads",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this paste was created (UTC)",
    )

    def __repr__(self) -> str:
        return (
            f"<Paste(id={self.id}, view_count={self.view_count}, "
            f"max_views={self.max_views}, expires_at='{self.expires_at}')>"
        )
