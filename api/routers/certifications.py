"""
Certifications router - CRUD operations for certification records.

Service-layer errors (not found, validation, Drive failures) are turned
into HTTP responses by the exception handlers in ``api.main``.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, File, UploadFile, status

from api.dependencies import (
    get_certification_service, get_current_user, get_drive_service, read_upload
)
from api.schemas.certification_schema import (
    CertificationCreate, CertificationExtended, CertificationResponse,
    CertificationSummaryResponse, CertificationUpdate
)
from services.certification_service import CertificationService, summarize_records
from services.drive_service import GoogleDriveService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/certifications', tags=['certifications'])


@router.get('', response_model=List[CertificationExtended])
async def list_certifications(
    service: CertificationService = Depends(get_certification_service)
):
    """
    List every certification with its employee's name and NIK.

    Ordered by entry date, newest first. Not paginated.
    """
    return service.list_all()


@router.get('/types', response_model=List[str])
async def list_certification_types(
    service: CertificationService = Depends(get_certification_service)
):
    """
    Known certification categories for autocomplete.

    **Example:**
    ```bash
    curl http://localhost:8000/api/certifications/types
    ```
    """
    return service.list_distinct_types()


@router.get('/summary', response_model=CertificationSummaryResponse)
async def get_certification_summary(
    service: CertificationService = Depends(get_certification_service)
):
    """Total records and records entered this calendar month."""
    return CertificationSummaryResponse(**summarize_records(service.list_all()))


@router.get('/{record_id}', response_model=CertificationExtended)
async def get_certification(
    record_id: str,
    service: CertificationService = Depends(get_certification_service)
):
    return service.get(record_id)


@router.post('', response_model=CertificationResponse, status_code=status.HTTP_201_CREATED)
async def create_certification(
    body: CertificationCreate,
    service: CertificationService = Depends(get_certification_service),
    current_user: str = Depends(get_current_user)
):
    """
    Create a certification.

    Blank fields are stored as NULL. ``account_id``, ``cert_type``,
    ``cert_name`` and ``cert_date`` are required (422 otherwise).
    """
    record = service.create(body.model_dump())
    logger.info(f"Certification {record.id} created by {current_user}")
    return record


@router.patch('/{record_id}', response_model=CertificationResponse)
async def update_certification(
    record_id: str,
    body: CertificationUpdate,
    service: CertificationService = Depends(get_certification_service),
    current_user: str = Depends(get_current_user)
):
    """Update only the fields present in the request body."""
    record = service.update(record_id, body.model_dump(exclude_unset=True))
    logger.info(f"Certification {record_id} updated by {current_user}")
    return record


@router.delete('/{record_id}', status_code=status.HTTP_204_NO_CONTENT)
async def delete_certification(
    record_id: str,
    service: CertificationService = Depends(get_certification_service),
    current_user: str = Depends(get_current_user)
):
    """
    Permanently delete a certification.

    **Returns:**
    - 204 No Content on success
    - 404 if the record does not exist
    """
    service.delete(record_id)
    logger.info(f"Certification {record_id} deleted by {current_user}")
    return None


@router.post('/{record_id}/file', response_model=CertificationResponse)
def attach_certification_file(
    record_id: str,
    file: UploadFile = File(..., description="Certificate document"),
    service: CertificationService = Depends(get_certification_service),
    drive: GoogleDriveService = Depends(get_drive_service),
    current_user: str = Depends(get_current_user)
):
    """
    Upload a document to Google Drive and attach it to a record.

    The upload and the record update are not atomic: if the update fails
    the uploaded file is left in Drive. Runs in the threadpool.
    """
    service.get(record_id)

    content = read_upload(file)
    file_id = drive.upload_file(file.filename, content, file.content_type)
    record = service.attach_file(record_id, file_id)

    logger.info(f"File {file_id} attached to certification {record_id} by {current_user}")
    return record
