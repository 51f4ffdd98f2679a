"""
Common Pydantic schemas used across the API.

This module contains shared schemas for errors and the health check.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
    path: Optional[str] = Field(None, description="Request path that caused the error")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Certification not found",
                "detail": {"id": "5b0c6f0e-8a4b-4f4e-9a57-3f0c2f0d9b11"},
                "timestamp": "2026-10-16T12:00:00Z",
                "path": "/api/certifications/5b0c6f0e-8a4b-4f4e-9a57-3f0c2f0d9b11"
            }
        }


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
    database: str = Field(..., description="Database connection status")
    drive: str = Field(..., description="Google Drive configuration status")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2026-10-16T12:00:00Z",
                "version": "1.0.0",
                "database": "connected",
                "drive": "configured"
            }
        }
