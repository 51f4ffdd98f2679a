"""
Certification form view - create or edit a single record.
"""

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional

from services.account_service import AccountService
from services.certification_service import CertificationService
from services.drive_service import GoogleDriveService
from services.exceptions import ValidationError
from views.base import (
    AccountRow, CertificationRow, LocalFile, NotificationLevel, Notifier, ServiceGate, iso_date
)

logger = logging.getLogger(__name__)

FORM_FIELDS = ('account_id', 'entry_date', 'cert_type', 'cert_name',
               'cert_date', 'file_id', 'notes')


class CertificationFormView:
    """
    Modal form holding a local draft of one certification.

    The draft is only sent to the service on ``submit``; closing the form
    simply drops it.
    """

    def __init__(
        self,
        certification_service: CertificationService,
        account_service: AccountService,
        drive_service: GoogleDriveService,
        notifier: Notifier,
        initial: Optional[Any] = None,
        on_success: Optional[Callable[[], Awaitable[None]]] = None,
        gate: Optional[ServiceGate] = None
    ):
        self.certifications = certification_service
        self.accounts_service = account_service
        self.drive = drive_service
        self.notifier = notifier
        self.initial = initial
        self.on_success = on_success
        self.gate = gate or ServiceGate()

        self.draft: Dict[str, str] = {
            name: iso_date(getattr(initial, name, None)) if name.endswith('_date')
            else (getattr(initial, name, None) or '')
            for name in FORM_FIELDS
        }
        if not self.draft['entry_date']:
            self.draft['entry_date'] = date.today().isoformat()

        self.accounts: List[AccountRow] = []
        self.existing_types: List[str] = []
        self.show_type_dropdown = False
        self.uploading = False
        self.is_saving = False

    @property
    def is_edit(self) -> bool:
        return bool(getattr(self.initial, 'id', None))

    async def load_options(self):
        """Fetch the employee picker entries and the known categories."""
        try:
            self.accounts = await self.gate.run(self._fetch_accounts)
            self.existing_types = await self.gate.run(self.certifications.list_distinct_types)
        except Exception as e:
            logger.error(f"Loading form options failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Could not load employees and categories.')

    def _fetch_accounts(self) -> List[AccountRow]:
        return [AccountRow.from_record(a) for a in self.accounts_service.get_all()]

    def _save(self, draft: Dict[str, str]) -> CertificationRow:
        if self.is_edit:
            record = self.certifications.update(self.initial.id, draft)
        else:
            record = self.certifications.create(draft)
        return CertificationRow.from_record(record)

    def set_field(self, name: str, value: str):
        if name not in self.draft:
            raise KeyError(f"Unknown form field: {name}")
        if name == 'cert_type':
            self.on_type_input(value)
        else:
            self.draft[name] = value

    # Category autocomplete

    def on_type_input(self, text: str):
        self.draft['cert_type'] = text
        self.show_type_dropdown = True

    @property
    def type_suggestions(self) -> List[str]:
        needle = self.draft['cert_type'].lower()
        return [t for t in self.existing_types if needle in t.lower()]

    def select_type(self, value: str):
        self.draft['cert_type'] = value
        self.show_type_dropdown = False

    def dismiss_suggestions(self):
        """Outside click."""
        self.show_type_dropdown = False

    async def on_file_selected(self, file: Optional[LocalFile]):
        """
        Upload the picked document straight away and keep its Drive id.

        On failure the field is left as it was.
        """
        if file is None:
            return

        self.uploading = True
        try:
            file_id = await self.gate.run(self.drive.upload_file, file.filename,
                                          file.content, file.content_type)
            self.draft['file_id'] = file_id
        except Exception as e:
            logger.error(f"Certificate upload failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Failed to upload the file.')
        finally:
            self.uploading = False

    async def submit(self) -> Optional[CertificationRow]:
        """
        Save the draft.

        Only the employee selection is checked here; without one a warning
        is shown and nothing is sent.
        """
        if not self.draft['account_id']:
            self.notifier.alert(NotificationLevel.WARNING, 'Warning', 'Select an employee first.')
            return None

        self.is_saving = True
        try:
            record = await self.gate.run(self._save, dict(self.draft))
        except ValidationError as e:
            self.notifier.alert(NotificationLevel.WARNING, 'Warning', str(e))
            return None
        except Exception as e:
            logger.error(f"Saving certification failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Failed to save the data.')
            return None
        finally:
            self.is_saving = False

        self.notifier.alert(NotificationLevel.SUCCESS, 'Saved', 'Certification data has been saved.')
        if self.on_success:
            await self.on_success()
        return record
