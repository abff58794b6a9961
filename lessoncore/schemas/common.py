"""
Common schema types used across the API.
"""

from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"


class SuccessResponse(BaseModel):
    """Acknowledgement for writes that return no resource."""

    message: str
    data: Optional[Any] = None
