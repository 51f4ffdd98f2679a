"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.certification_schema import (
    AccountSummary, AccountRef, CertificationCreate, CertificationUpdate,
    CertificationResponse, CertificationExtended,
    CertificationSummaryResponse
)
from api.schemas.import_schema import (
    ImportRowSchema, ImportPreviewResponse, ImportCommitRequest,
    ImportCommitResponse, FileUploadResponse
)

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',

    # Certification
    'AccountSummary',
    'AccountRef',
    'CertificationCreate',
    'CertificationUpdate',
    'CertificationResponse',
    'CertificationExtended',
    'CertificationSummaryResponse',

    # Import
    'ImportRowSchema',
    'ImportPreviewResponse',
    'ImportCommitRequest',
    'ImportCommitResponse',
    'FileUploadResponse',
]
