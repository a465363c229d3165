"""
Pastebin Backend - Pydantic Schemas
====================================

What:  Pydantic models passed between the HTTP surface, PasteService, the
       store and the cache.
How:   PasteResponse is the value the service hands out and the JSON
       document the cache stores; PasteSummary is the archive projection.
       Both read directly from ORM rows (from_attributes).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PasteCreate(BaseModel):
    """
    What:  Input for PasteService.create, built by the POST /update/ route.

    Fields are not constrained here; PasteService.create validates them so
    the client gets a 400 with a readable message instead of a 422.
    """
    title: str = Field(default="", description="Optional display label")
    content: str = Field(default="", description="Paste body (required, non-blank)")
    language: str = Field(default="", description="Optional language hint")


class PasteResponse(BaseModel):
    """
    What:  Full representation of a stored paste.
    Who:   Returned by PasteService.get; serialized into the cache.
    """
    id: str = Field(description="Short paste identifier")
    timestamp: datetime = Field(description="When the paste was created (UTC)")
    content: str = Field(description="Paste body")
    email: str = Field(description="Identity of the creator")
    title: str = Field(default="", description="Optional display label")
    language: str = Field(default="", description="Optional language hint")

    model_config = {"from_attributes": True}


class PasteSummary(BaseModel):
    """
    What:  Archive row: the (id, title, email) projection of a paste.
    Who:   Returned by PasteService.list_recent, newest first.
    """
    id: str = Field(description="Short paste identifier")
    title: str = Field(default="", description="Display label")
    email: str = Field(description="Identity of the creator")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every non-2xx response.

    Example:
        {
            "error": "forbidden",
            "message": "Invalid deletion attempt... only paste owners can delete pastes",
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.

    The store is critical (unhealthy when down); the cache is not
    (degraded when down, reads still work).
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    cache: str = Field(description="Cache status: available, unavailable, disabled")
    uptime_seconds: float = Field(description="Seconds since service started")


class ArchiveResponse(BaseModel):
    """Archive listing, used when a client asks /archive/ for JSON."""
    pastes: List[PasteSummary] = Field(description="All pastes, newest first")
