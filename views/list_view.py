"""
Certification list view - table, search, counters and per-row actions.
"""

import logging
from typing import Any, Dict, List, Optional

from services.account_service import AccountService
from services.certification_import_service import CertificationImportService
from services.certification_service import CertificationService, summarize_records
from services.drive_service import GoogleDriveService
from views.base import (
    CertificationRow, LocalFile, NotificationLevel, Notifier, ServiceGate
)
from views.form_view import CertificationFormView
from views.import_wizard import ImportWizard

logger = logging.getLogger(__name__)


def search_text(record: Any) -> str:
    """Lower-cased haystack: employee name, NIK, certification name and category."""
    account = getattr(record, 'account', None)
    parts = [
        getattr(account, 'full_name', None),
        getattr(account, 'internal_nik', None),
        getattr(record, 'cert_name', None),
        getattr(record, 'cert_type', None),
    ]
    return ' '.join(str(p) for p in parts if p).lower()


class CertificationListView:
    """
    Global certification list.

    Holds the fetched records and filters them locally; there is no
    pagination and no server-side search.
    """

    def __init__(
        self,
        certification_service: CertificationService,
        drive_service: GoogleDriveService,
        notifier: Notifier,
        account_service: Optional[AccountService] = None,
        import_service: Optional[CertificationImportService] = None,
        gate: Optional[ServiceGate] = None
    ):
        self.certifications = certification_service
        self.drive = drive_service
        self.notifier = notifier
        self.account_service = account_service
        self.import_service = import_service
        self.gate = gate or ServiceGate()

        self.records: List[CertificationRow] = []
        self.is_loading = False
        self.search_term = ''
        self.uploading_id: Optional[str] = None
        self.form: Optional[CertificationFormView] = None
        self.wizard: Optional[ImportWizard] = None

    async def load(self):
        """Fetch all records (on mount and after saves/imports)."""
        self.is_loading = True
        try:
            self.records = await self.gate.run(self._fetch_rows)
        except Exception as e:
            logger.error(f"Loading certifications failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Failed to load certification data.')
        finally:
            self.is_loading = False

    def _fetch_rows(self) -> List[CertificationRow]:
        return [CertificationRow.from_record(r) for r in self.certifications.list_all()]

    def _attach(self, record_id: str, file_id: str) -> CertificationRow:
        return CertificationRow.from_record(self.certifications.attach_file(record_id, file_id))

    @property
    def filtered(self) -> List[CertificationRow]:
        needle = self.search_term.lower()
        return [r for r in self.records if needle in search_text(r)]

    @property
    def summary(self) -> Dict[str, int]:
        return summarize_records(self.records)

    def file_url(self, record: Any) -> Optional[str]:
        file_id = getattr(record, 'file_id', None)
        return self.drive.get_file_url(file_id) if file_id else None

    async def delete(self, record: Any) -> bool:
        """
        Delete a record after confirmation.

        The record is dropped from local state; the list is not re-fetched.
        """
        if not self.notifier.confirm('Delete certification?', 'This cannot be undone.'):
            return False

        record_id = record.id
        try:
            await self.gate.run(self.certifications.delete, record_id)
        except Exception as e:
            logger.error(f"Deleting certification {record_id} failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Failed to delete the data.')
            return False

        self.records = [r for r in self.records if r.id != record_id]
        self.notifier.alert(NotificationLevel.SUCCESS, 'Deleted', 'Certification has been deleted.')
        return True

    async def attach_file(self, record: Any, file: Optional[LocalFile]) -> bool:
        """Upload a document for a row and store its Drive id on the record."""
        if file is None:
            return False

        self.uploading_id = record.id
        try:
            file_id = await self.gate.run(self.drive.upload_file, file.filename,
                                          file.content, file.content_type)
            updated = await self.gate.run(self._attach, record.id, file_id)
        except Exception as e:
            logger.error(f"Attaching file to {record.id} failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Failed to upload the document.')
            return False
        finally:
            self.uploading_id = None

        self.records = [updated if r.id == record.id else r for r in self.records]
        self.notifier.alert(NotificationLevel.SUCCESS, 'Uploaded', 'Certificate document has been attached.')
        return True

    # Modals

    def open_form(self, record: Optional[Any] = None) -> CertificationFormView:
        self.form = CertificationFormView(
            self.certifications,
            self.account_service,
            self.drive,
            self.notifier,
            initial=record,
            on_success=self._on_form_saved,
            gate=self.gate
        )
        return self.form

    def close_form(self):
        self.form = None

    async def _on_form_saved(self):
        self.close_form()
        await self.load()

    def open_import(self) -> ImportWizard:
        self.wizard = ImportWizard(self.import_service, self.notifier,
                                   on_success=self._on_import_done, gate=self.gate)
        return self.wizard

    def close_import(self):
        if self.wizard:
            self.wizard.close()
        self.wizard = None

    async def _on_import_done(self):
        self.wizard = None
        await self.load()
