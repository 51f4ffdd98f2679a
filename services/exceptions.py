"""
Exceptions raised by the service layer.

Routers, views and the CLI catch these at the action boundary and turn them
into HTTP errors, alerts or exit codes.
"""

from typing import List, Optional


class CertificationError(Exception):
    """Base class for all service-layer errors."""


class ValidationError(CertificationError):
    """Raised before any store call when fields are missing or malformed."""

    def __init__(self, fields: List[str], reason: str = 'Missing required fields'):
        self.fields = fields
        self.reason = reason
        super().__init__(f"{reason}: {', '.join(fields)}")


class RecordNotFoundError(CertificationError):
    """Raised when a certification record does not exist."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Certification {record_id} not found")


class SpreadsheetParseError(CertificationError):
    """Raised when an uploaded file cannot be read as a spreadsheet."""


class DriveUploadError(CertificationError):
    """Raised when a file could not be stored on Google Drive."""


class ImportCommitError(CertificationError):
    """
    Raised when an import commit stops part-way.

    Rows committed before the failing one stay committed.
    """

    def __init__(self, committed: int, row_number: Optional[int], cause: Exception):
        self.committed = committed
        self.row_number = row_number
        self.cause = cause
        super().__init__(
            f"Import stopped at spreadsheet row {row_number} after {committed} "
            f"committed rows: {cause}"
        )
