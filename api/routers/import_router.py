"""
Import router - Spreadsheet template download and bulk import.

The import is a two-step workflow: the client uploads a workbook to
``/preview`` and gets the parsed rows back, then sends the rows to
``/commit``. Nothing is stored between the two calls.
"""

import logging
from fastapi import APIRouter, Depends, File, Response, UploadFile

from api.dependencies import (
    get_current_user, get_import_service, read_upload, verify_file_extension
)
from api.schemas.certification_schema import CertificationResponse
from api.schemas.import_schema import (
    ImportCommitRequest, ImportCommitResponse, ImportPreviewResponse, ImportRowSchema
)
from services.certification_import_service import CertificationImportService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/import', tags=['import'])

XLSX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@router.get('/template')
def download_template(
    service: CertificationImportService = Depends(get_import_service)
):
    """
    Download the import template.

    One row per employee is pre-filled with id, NIK and name. The file is
    named ``HUREMA_Certification_Template_<date>.xlsx``.

    **Example:**
    ```bash
    curl -OJ http://localhost:8000/api/import/template
    ```
    """
    content, filename = service.generate_template()

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )


@router.post('/preview', response_model=ImportPreviewResponse)
def preview_import(
    file: UploadFile = File(..., description="Filled-in template (.xlsx)"),
    service: CertificationImportService = Depends(get_import_service),
    current_user: str = Depends(get_current_user)
):
    """
    Parse an uploaded workbook without storing anything.

    **Returns:**
    - Every non-blank row with its `is_valid` flag
    - 400 if the file is not a readable spreadsheet
    """
    logger.info(f"Import preview from {current_user}: {file.filename}")

    verify_file_extension(file.filename)
    content = read_upload(file)

    rows = service.parse_upload(content)

    return ImportPreviewResponse(
        filename=file.filename,
        total=len(rows),
        valid_count=sum(1 for row in rows if row.is_valid),
        rows=[ImportRowSchema.from_row(row) for row in rows]
    )


@router.post('/commit', response_model=ImportCommitResponse)
def commit_import(
    body: ImportCommitRequest,
    service: CertificationImportService = Depends(get_import_service),
    current_user: str = Depends(get_current_user)
):
    """
    Create a record for every valid row, in row order.

    Validity is recomputed from the row fields. Rows are stored one at a
    time; if one fails the response is an error but earlier rows stay.
    """
    rows = [row.to_row() for row in body.rows]
    created = service.commit_import(rows)

    logger.info(f"Import of {len(created)} certifications committed by {current_user}")

    return ImportCommitResponse(
        committed=len(created),
        skipped=len(rows) - len(created),
        records=[CertificationResponse.model_validate(record) for record in created]
    )
