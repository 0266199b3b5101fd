"""
Pastebin Backend: Paste Service
================================

What:  Create and read rules for pastes, independent of HTTP.
How:   Receives an AsyncSession per call, issues parameterized statements
       through SQLAlchemy, and raises application exceptions that the global
       handlers map to status codes.
Who:   Called by the /paste route handlers.

Read Flow (GET /paste/{id}):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐
    │  SELECT  │───▶│ expires_at < │───▶│ view_count ≥ │───▶│   UPDATE     │
    │  by id   │    │ now? → 410   │    │ max? → 410   │    │ view_count+1 │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────────┘
         │ none → 404

    The SELECT and the UPDATE are separate statements with no lock between
    them. Two concurrent reads of a paste one view from its limit can both
    pass the check, so view_count may end up above max_views.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.exceptions import DatabaseError, ExpiredError, NotFoundError, ValidationError
from pastebin.models.paste import Paste
from pastebin.schemas.paste import PasteCreate, PasteCreated, PasteView

logger = logging.getLogger(__name__)


def generate_paste_id() -> str:
    """Current Unix time in milliseconds as a decimal string."""
    return str(time.time_ns() // 1_000_000)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PasteService:
    """
    Business logic layer for paste operations.

    Responsibilities:
        - create_paste(): validate, build the row, insert
        - read_paste(): look up, apply expiry policy, count the view

    Error Handling Strategy:
        SQLAlchemy errors are logged here with the paste id and re-raised as
        DatabaseError, whose client message is always the generic
        "Server error". Our own exceptions propagate untouched.
    """

    async def create_paste(self, db: AsyncSession, payload: Optional[PasteCreate]) -> PasteCreated:
        """
        Store a new paste.

        Args:
            db: Async database session
            payload: Parsed request body; None when the body was empty

        Returns:
            PasteCreated with the new id and its retrieval link

        Raises:
            ValidationError: content missing or empty (→ 400, nothing inserted)
            DatabaseError: insert failed, including id collisions (→ 500)
        """
        if payload is None or not payload.content:
            raise ValidationError(message="Content is required", field="content")

        paste_id = generate_paste_id()

        expires_at = None
        if payload.expires_in_minutes:
            expires_at = _utcnow() + timedelta(minutes=payload.expires_in_minutes)

        paste = Paste(
            id=paste_id,
            content=payload.content,
            expires_at=expires_at,
            max_views=payload.max_views or None,
            view_count=0,
        )

        try:
            db.add(paste)
            await db.commit()
        except Exception as e:
            logger.error("Database error creating paste %s: %s", paste_id, str(e), exc_info=True)
            raise DatabaseError(
                context={"paste_id": paste_id, "error_type": type(e).__name__},
            )

        logger.info(
            "Paste %s created (%d chars, expires_at=%s, max_views=%s)",
            paste_id,
            len(payload.content),
            expires_at.isoformat() if expires_at else None,
            paste.max_views,
        )
        return PasteCreated(id=paste_id, link=f"/paste/{paste_id}")

    async def read_paste(self, db: AsyncSession, paste_id: str) -> PasteView:
        """
        Return a paste's content and count the view.

        Expiry is checked time first, then views; either one rejects the read
        without touching view_count.

        The returned `views` is the loaded view_count plus one. The row is
        not re-read after the UPDATE.

        Raises:
            NotFoundError: no paste with this id (→ 404)
            ExpiredError: expired by time or by views (→ 410)
            DatabaseError: SELECT or UPDATE failed (→ 500)
        """
        try:
            result = await db.execute(select(Paste).where(Paste.id == paste_id))
            paste = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching paste %s: %s", paste_id, str(e), exc_info=True)
            raise DatabaseError(
                context={"paste_id": paste_id, "error_type": type(e).__name__},
            )

        if paste is None:
            raise NotFoundError(resource="Paste", resource_id=paste_id)

        # ── Expiry by time ────────────────────────────────────────────────
        if paste.expires_at is not None and _as_utc(paste.expires_at) < _utcnow():
            logger.warning("Paste %s expired at %s", paste_id, paste.expires_at)
            raise ExpiredError(reason="time", context={"paste_id": paste_id})

        # ── Expiry by views ───────────────────────────────────────────────
        if paste.max_views and paste.view_count >= paste.max_views:
            logger.warning(
                "Paste %s reached its view limit (%d/%d)",
                paste_id,
                paste.view_count,
                paste.max_views,
            )
            raise ExpiredError(reason="views", context={"paste_id": paste_id})

        views = paste.view_count + 1

        try:
            await db.execute(
                update(Paste)
                .where(Paste.id == paste_id)
                .values(view_count=Paste.view_count + 1)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except Exception as e:
            logger.error(
                "Database error counting view for paste %s: %s", paste_id, str(e), exc_info=True
            )
            raise DatabaseError(
                context={"paste_id": paste_id, "error_type": type(e).__name__},
            )

        logger.info("Paste %s read (views=%d)", paste_id, views)
        return PasteView(content=paste.content, views=views)


# ── Singleton Instance ────────────────────────────────────────────────────
# PasteService holds no state; sessions are passed per call
paste_service = PasteService()
