"""
Files router - Google Drive uploads for certificate documents.
"""

import logging
from fastapi import APIRouter, Depends, File, UploadFile, status

from api.dependencies import get_current_user, get_drive_service, read_upload
from api.schemas.import_schema import FileUploadResponse
from services.drive_service import GoogleDriveService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/files', tags=['files'])


@router.post('', response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    file: UploadFile = File(..., description="Document to store"),
    drive: GoogleDriveService = Depends(get_drive_service),
    current_user: str = Depends(get_current_user)
):
    """
    Store a document on Google Drive.

    Returns the Drive file id to put in a certification's ``file_id``.
    502 if Drive rejects the upload.
    """
    content = read_upload(file)

    file_id = drive.upload_file(file.filename, content, file.content_type)
    logger.info(f"{current_user} uploaded {file.filename} as {file_id}")

    return FileUploadResponse(file_id=file_id, url=drive.get_file_url(file_id))


@router.get('/{file_id}/url', response_model=FileUploadResponse)
async def get_file_url(
    file_id: str,
    drive: GoogleDriveService = Depends(get_drive_service)
):
    return FileUploadResponse(file_id=file_id, url=drive.get_file_url(file_id))
