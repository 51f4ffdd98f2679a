"""
Import-related Pydantic schemas.

This module contains schemas for the spreadsheet preview/commit workflow
and Drive uploads.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from api.schemas.certification_schema import CertificationResponse
from services.certification_import_service import ImportRow


class ImportRowSchema(BaseModel):
    """One parsed spreadsheet row."""

    row_number: int = Field(..., ge=1, description="1-based spreadsheet row")
    account_id: Optional[str] = None
    full_name: Optional[str] = None
    internal_nik: Optional[str] = None
    cert_type: Optional[str] = None
    cert_name: Optional[str] = None
    cert_date: Optional[str] = None
    notes: Optional[str] = None
    file_link: Optional[str] = None
    is_valid: bool = Field(False, description="Derived; recomputed on commit")

    @classmethod
    def from_row(cls, row: ImportRow) -> 'ImportRowSchema':
        return cls(**row.to_dict())

    def to_row(self) -> ImportRow:
        return ImportRow(**self.model_dump(exclude={'is_valid'}))


class ImportPreviewResponse(BaseModel):
    """Parsed rows of an uploaded spreadsheet."""

    filename: Optional[str] = None
    total: int = Field(..., description="Rows read")
    valid_count: int = Field(..., description="Rows that will be imported")
    rows: List[ImportRowSchema]


class ImportCommitRequest(BaseModel):
    """Rows to commit, as returned by the preview."""

    rows: List[ImportRowSchema]


class ImportCommitResponse(BaseModel):
    """Result of a committed import."""

    committed: int = Field(..., description="Records created")
    skipped: int = Field(..., description="Invalid rows ignored")
    records: List[CertificationResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "committed": 2,
                "skipped": 1,
                "records": []
            }
        }


class FileUploadResponse(BaseModel):
    """Stored Drive file."""

    file_id: str = Field(..., description="Google Drive file id")
    url: str = Field(..., description="Public URL of the file")
