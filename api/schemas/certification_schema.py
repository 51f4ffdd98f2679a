"""
Certification-related Pydantic schemas.

Input fields are plain optional strings on purpose: blank values are
accepted here and normalized to NULL by the service layer.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class AccountSummary(BaseModel):
    """Employee entry for pickers."""

    id: str = Field(..., description="Account ID")
    full_name: str = Field(..., description="Employee name")
    internal_nik: Optional[str] = Field(None, description="Internal employee number")

    class Config:
        from_attributes = True


class AccountRef(BaseModel):
    """Employee display fields joined onto a certification."""

    full_name: str
    internal_nik: Optional[str] = None

    class Config:
        from_attributes = True


class CertificationCreate(BaseModel):
    """Request body for creating a certification."""

    account_id: Optional[str] = Field(None, description="Employee account ID (required)")
    entry_date: Optional[str] = Field(None, description="Date logged (YYYY-MM-DD)")
    cert_type: Optional[str] = Field(None, description="Certification category (required)")
    cert_name: Optional[str] = Field(None, description="Certification title (required)")
    cert_date: Optional[str] = Field(None, description="Certification date, YYYY-MM-DD (required)")
    file_id: Optional[str] = Field(None, description="Google Drive file id")
    notes: Optional[str] = Field(None, description="Free-text notes")

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "5b0c6f0e-8a4b-4f4e-9a57-3f0c2f0d9b11",
                "entry_date": "2026-10-16",
                "cert_type": "K3 Umum",
                "cert_name": "Ahli K3 Umum Kemnaker",
                "cert_date": "2026-09-30",
                "file_id": "",
                "notes": ""
            }
        }


class CertificationUpdate(CertificationCreate):
    """Partial update; only the fields sent are changed."""


class CertificationResponse(BaseModel):
    """Stored certification record."""

    id: str
    account_id: str
    entry_date: Optional[date] = None
    cert_type: str
    cert_name: str
    cert_date: date
    file_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CertificationExtended(CertificationResponse):
    """Certification with the employee's display fields."""

    account: Optional[AccountRef] = None


class CertificationSummaryResponse(BaseModel):
    """Dashboard counters for the certification list."""

    total: int = Field(..., description="Total records")
    this_month: int = Field(..., description="Records entered in the current calendar month")
