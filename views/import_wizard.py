"""
Import wizard view - two-step bulk import of certifications.

    AWAITING_FILE --(parse ok)--> PREVIEWING --(confirmed commit ok)--> CLOSED
    AWAITING_FILE --(parse fails)--> AWAITING_FILE
    PREVIEWING --(replace file)--> AWAITING_FILE
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from services.certification_import_service import CertificationImportService, ImportRow
from views.base import LocalFile, NotificationLevel, Notifier, ServiceGate

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    AWAITING_FILE = 'awaiting_file'
    PREVIEWING = 'previewing'
    CLOSED = 'closed'


class ImportWizard:
    """State of the bulk-import modal."""

    def __init__(
        self,
        import_service: CertificationImportService,
        notifier: Notifier,
        on_success: Optional[Callable[[], Awaitable[None]]] = None,
        gate: Optional[ServiceGate] = None
    ):
        self.import_service = import_service
        self.notifier = notifier
        self.on_success = on_success
        self.gate = gate or ServiceGate()

        self.step = WizardStep.AWAITING_FILE
        self.preview_rows: List[ImportRow] = []
        self.is_processing = False
        self.is_uploading = False

    @property
    def valid_count(self) -> int:
        return sum(1 for row in self.preview_rows if row.is_valid)

    async def download_template(self) -> Optional[Tuple[bytes, str]]:
        """Build the template; the caller hands the bytes to the browser/disk."""
        try:
            return await self.gate.run(self.import_service.generate_template)
        except Exception as e:
            logger.error(f"Template generation failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'Could not generate the template.')
            return None

    async def upload(self, file: Optional[LocalFile]):
        """Parse the picked workbook and move to the preview on success."""
        if file is None or self.step != WizardStep.AWAITING_FILE:
            return

        self.is_processing = True
        try:
            rows = await self.gate.run(self.import_service.parse_upload, file.content)
        except Exception as e:
            logger.error(f"Parsing {file.filename} failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', 'File format is not supported.')
            return
        finally:
            self.is_processing = False

        self.preview_rows = rows
        self.step = WizardStep.PREVIEWING
        logger.info(f"Previewing {len(rows)} rows ({self.valid_count} valid) from {file.filename}")

    def replace_file(self):
        self.preview_rows = []
        self.step = WizardStep.AWAITING_FILE

    async def commit(self) -> bool:
        """
        Commit the valid preview rows after an explicit confirmation.

        Returns:
            True if the import ran and the wizard closed
        """
        if self.step != WizardStep.PREVIEWING:
            return False

        valid_count = self.valid_count
        if valid_count == 0:
            self.notifier.alert(NotificationLevel.WARNING, 'Warning', 'There are no valid rows.')
            return False

        if not self.notifier.confirm('Confirm Import', f"Import {valid_count} certifications?"):
            return False

        self.is_uploading = True
        try:
            await self.gate.run(self.import_service.commit_import, self.preview_rows)
        except Exception as e:
            logger.error(f"Import commit failed: {e}")
            self.notifier.alert(NotificationLevel.ERROR, 'Failed', f"An error occurred: {e}")
            return False
        finally:
            self.is_uploading = False

        self.notifier.alert(NotificationLevel.SUCCESS, 'Imported', 'Certification data has been imported.')
        self.close()
        if self.on_success:
            await self.on_success()
        return True

    def close(self):
        self.preview_rows = []
        self.step = WizardStep.CLOSED
