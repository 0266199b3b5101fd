"""
Pastebin Backend: Pydantic Request/Response Schemas
====================================================

What:  Pydantic models defining the JSON contract of the API.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and builds the OpenAPI docs from them.

Wire names:
    The request body uses camelCase (`expiresInMinutes`, `maxViews`);
    Python code uses snake_case through field aliases.
"""

from typing import Optional

from pydantic import BaseModel, Field

# About 1900 years either way; far from datetime.min/max for any current date
MAX_EXPIRY_MINUTES = 1_000_000_000


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PasteCreate(BaseModel):
    """
    Body of POST /paste.

    Every field is optional at the schema level: a missing or empty `content`
    is a business-rule failure ("Content is required", 400) raised by the
    service, not a schema error.

    Zero values mean "not set", so `maxViews: 0` stores no view limit and
    `expiresInMinutes: 0` stores no expiry. Negative minutes are accepted and
    produce a paste that is already expired. NaN, Infinity and values beyond
    MAX_EXPIRY_MINUTES either way fail validation (400 "Invalid request body").
    """
    content: Optional[str] = Field(default=None, description="Text content (required, non-empty)")
    # Bounded so now + delta stays inside datetime's year 1..9999 range
    expires_in_minutes: Optional[float] = Field(
        default=None,
        alias="expiresInMinutes",
        allow_inf_nan=False,
        ge=-MAX_EXPIRY_MINUTES,
        le=MAX_EXPIRY_MINUTES,
        description="Minutes until the paste expires (omit for no expiry)",
    )
    max_views: Optional[int] = Field(
        default=None,
        alias="maxViews",
        description="Number of reads allowed (omit for unlimited)",
    )

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PasteCreated(BaseModel):
    """Returned by POST /paste with HTTP 201."""
    id: str = Field(description="Generated paste id")
    link: str = Field(description="Retrieval path, /paste/{id}")


class PasteView(BaseModel):
    """
    Returned by GET /paste/{id} with HTTP 200.

    `views` is the count after this read (the stored count plus one).
    """
    content: str = Field(description="Paste text content")
    views: int = Field(description="View count including this read")


class StatusResponse(BaseModel):
    """Returned by GET /."""
    message: str


class ErrorResponse(BaseModel):
    """
    Error body for every non-2xx response.

    Example:
        {"error": "Paste expired", "request_id": "a1b2c3d4"}
    """
    error: str = Field(description="Human-readable error message")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
