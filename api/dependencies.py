"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions, the
service layer, upload checks and the optional API-key guard.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends, HTTPException, Header, UploadFile, status

from api.config import settings
from services.account_service import AccountService
from services.certification_import_service import CertificationImportService
from services.certification_service import CertificationService
from services.drive_service import GoogleDriveService

logger = logging.getLogger(__name__)

# Create database engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=settings.DB_POOL_PRE_PING,
    echo=settings.DEBUG
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields a session and closes it once the request is done.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    x_api_key: str = Header(None, alias=settings.API_KEY_HEADER)
) -> str:
    """
    Identify the caller.

    With API-key auth disabled every caller is "public". Otherwise the key
    itself is used as the user identifier.

    Raises:
        HTTPException: 401 if auth is enabled and no key was sent
    """
    if not settings.ENABLE_API_KEY_AUTH:
        return "public"

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return x_api_key


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Raises:
        HTTPException: 413 if the file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True


def verify_file_extension(filename: str) -> bool:
    """
    Verify a spreadsheet upload has an allowed extension.

    Raises:
        HTTPException: 400 if the extension is not allowed
    """
    ext = Path(filename or '').suffix.lower()

    if ext not in [e.lower() for e in settings.ALLOWED_EXTENSIONS]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File extension '{ext}' not allowed. "
                   f"Allowed extensions: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    return True


def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded file from a sync route, enforcing the size limit.

    The declared size is checked before reading when the client sent one.

    Raises:
        HTTPException: 413 if the file is too large
    """
    if getattr(file, 'size', None) is not None:
        verify_file_size(file.size)

    content = file.file.read()
    verify_file_size(len(content))
    return content


def get_certification_service(db: Session = Depends(get_db)) -> CertificationService:
    """Certification record service bound to the request session."""
    return CertificationService(db)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Employee directory service bound to the request session."""
    return AccountService(db)


def get_import_service(db: Session = Depends(get_db)) -> CertificationImportService:
    """Spreadsheet import/export service bound to the request session."""
    return CertificationImportService(db, extra_template_rows=settings.TEMPLATE_EXTRA_ROWS)


@lru_cache()
def get_drive_service() -> GoogleDriveService:
    """
    Get the shared Google Drive service.

    Credentials are read from settings; a missing configuration only
    surfaces when an upload is attempted.
    """
    return GoogleDriveService(
        service_account_email=settings.GOOGLE_SERVICE_ACCOUNT_EMAIL,
        private_key=settings.GOOGLE_PRIVATE_KEY,
        folder_id=settings.GDRIVE_FOLDER_ID
    )
