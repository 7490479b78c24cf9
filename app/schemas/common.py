"""
Market Registry Backend — Shared Response Schemas
===================================================

Error envelope, health check and status-change acknowledgements used by
more than one route module.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_transition",
            "message": "Cannot move market from 'pending' to 'approved'",
            "details": {"allowed": ["recommended"]},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class CreatedResponse(BaseModel):
    """Returned after registering a market or vendor."""
    id: int = Field(description="Database identifier of the new record")
    ref_no: str = Field(description="Generated reference number (MKT-/VND- prefix)")
    status: str = Field(description="Initial workflow status (always 'pending')")


class StatusUpdateResponse(BaseModel):
    success: bool = True
    id: int
    status: str
    stall_no: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    workflow_enforcement: bool = Field(description="Whether status changes are role-gated")
    uptime_seconds: float = Field(description="Seconds since service started")
