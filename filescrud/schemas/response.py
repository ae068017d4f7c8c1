"""
Generic response schemas untuk Files-CRUD Auth.
Menangani response format yang konsisten.
"""

from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    Simple message response schema.
    """
    message: str = Field(
        ...,
        description="Response message"
    )
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional details"
    )


class ErrorResponse(BaseModel):
    """
    Error response schema dengan struktur konsisten.
    """
    error: Dict[str, Any] = Field(
        ...,
        description="Error details"
    )


class HealthCheckResponse(BaseModel):
    """
    Health check response schema.
    """
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Application version")
    service: str = Field(..., description="Service name")
    database_backend: str = Field(..., description="Configured persistence backend")
