"""
Pastebin Backend: Paste Route Handlers
=======================================

What:  Handles POST /paste (create) and GET /paste/{paste_id} (read).
How:   Extracts the body or path parameter, delegates to PasteService,
       returns JSON. Errors are raised as application exceptions and turned
       into responses by the handlers in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.database import get_db_session
from pastebin.schemas.paste import ErrorResponse, PasteCreate, PasteCreated, PasteView
from pastebin.services.paste_service import paste_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/paste", tags=["Pastes"])


@router.post(
    "",
    status_code=201,
    response_model=PasteCreated,
    responses={
        201: {"description": "Paste stored", "model": PasteCreated},
        400: {"description": "Content missing or body malformed", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a paste",
    description=(
        "Stores text content and returns its retrieval link. Optional "
        "`expiresInMinutes` and `maxViews` limit how long and how often it can be read."
    ),
)
async def create_paste(
    payload: Optional[PasteCreate] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> PasteCreated:
    """
    Create a paste.

    An absent body reaches the service as None and is rejected there with
    the same 400 as a missing `content` field.
    """
    return await paste_service.create_paste(db=db, payload=payload)


@router.get(
    "/{paste_id}",
    response_model=PasteView,
    responses={
        200: {"description": "Paste content and view count", "model": PasteView},
        404: {"description": "Paste not found", "model": ErrorResponse},
        410: {"description": "Paste expired by time or view limit", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Read a paste",
    description="Returns the paste content and counts the view. Expired pastes answer 410.",
)
async def read_paste(
    paste_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PasteView:
    """
    Read a paste by id.

    Every 200 response increments the stored view count by one; 404 and 410
    responses leave it unchanged.
    """
    return await paste_service.read_paste(db=db, paste_id=paste_id)
