"""
Certification Import Service - Spreadsheet template, parsing and bulk commit.

This module contains the bulk import/export workflow for certification
records: building the pre-filled Excel template, parsing an uploaded
workbook into preview rows, and committing the valid rows one by one.
"""

import io
import logging
import re
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import CALENDAR_MAC_1904
from openpyxl.worksheet.datavalidation import DataValidation
from sqlalchemy.orm import Session

from backend.models.schema import AccountCertification
from services.account_service import AccountService
from services.certification_service import CertificationService, parse_iso_date
from services.exceptions import ImportCommitError, SpreadsheetParseError

logger = logging.getLogger(__name__)

# Default configuration (can be overridden)
DEFAULT_EXTRA_TEMPLATE_ROWS = 500
TEMPLATE_SHEET_NAME = 'Certification_Import'
TEMPLATE_FILENAME = 'HUREMA_Certification_Template_{date}.xlsx'

# Template / upload column headers
COL_ACCOUNT_ID = 'Account ID (Hidden)'
COL_NIK = 'NIK Internal'
COL_NAME = 'Employee Name'
COL_TYPE = 'Certification Type (*)'
COL_CERT_NAME = 'Certification Name (*)'
COL_CERT_DATE = 'Certification Date (YYYY-MM-DD) (*)'
COL_NOTES = 'Notes'
COL_DRIVE_LINK = 'G-Drive Link (Optional)'

TEMPLATE_HEADERS = [
    COL_ACCOUNT_ID, COL_NIK, COL_NAME, COL_TYPE,
    COL_CERT_NAME, COL_CERT_DATE, COL_NOTES, COL_DRIVE_LINK
]
TEMPLATE_COLUMN_WIDTHS = [20, 15, 25, 25, 30, 22, 30, 30]
CERT_DATE_COLUMN = TEMPLATE_HEADERS.index(COL_CERT_DATE) + 1

# Serial day 0 of the two Excel date systems
EXCEL_EPOCH_1900 = date(1899, 12, 30)
EXCEL_EPOCH_1904 = date(1904, 1, 1)

# Drive ids are long runs of word characters and hyphens
DRIVE_ID_PATTERN = re.compile(r'[-\w]{25,}', re.ASCII)


@dataclass
class ImportRow:
    """One parsed spreadsheet row awaiting preview and commit."""

    row_number: int
    account_id: Optional[str] = None
    full_name: Optional[str] = None
    internal_nik: Optional[str] = None
    cert_type: Optional[str] = None
    cert_name: Optional[str] = None
    cert_date: Optional[str] = None
    notes: Optional[str] = None
    file_link: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.account_id and self.cert_type and self.cert_name
                    and self.cert_date and parse_iso_date(self.cert_date))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['is_valid'] = self.is_valid
        return data


def excel_serial_to_date(serial: float, epoch: date = EXCEL_EPOCH_1900) -> date:
    """
    Convert a spreadsheet serial day number to a calendar date.

    Under the default 1900 system serial 25569 is 1970-01-01, so this is the
    same as ``(serial - 25569) * 86400`` seconds after the Unix epoch.
    """
    return (datetime.combine(epoch, time()) + timedelta(days=float(serial))).date()


def resolve_date(value: Any, epoch: date = EXCEL_EPOCH_1900) -> Optional[str]:
    """
    Resolve a certification-date cell to an ISO ``YYYY-MM-DD`` string.

    Accepts date/datetime cells, numeric serials and ISO text. Anything else
    resolves to None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        try:
            return excel_serial_to_date(value, epoch).isoformat()
        except (OverflowError, ValueError):
            logger.warning(f"Date serial out of range: {value}")
            return None

    text = str(value).strip()
    if not text:
        return None
    parsed = parse_iso_date(text)
    if parsed is None:
        logger.debug(f"Unrecognised date text: {text!r}")
        return None
    return parsed.isoformat()


def extract_drive_id(link: Optional[str]) -> Optional[str]:
    """Pull the Drive file id out of a sharing link, if there is one."""
    if not link:
        return None
    match = DRIVE_ID_PATTERN.search(str(link))
    return match.group(0) if match else None


def _cell_text(value: Any) -> Optional[str]:
    """Normalize a text-ish cell value; blanks become None."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def parse_workbook(content: bytes) -> List[ImportRow]:
    """
    Parse workbook bytes into import rows.

    The first worksheet is read; its first row supplies the column
    headers. Blank rows are skipped. No database access.

    Raises:
        SpreadsheetParseError: If the content is not a readable workbook
    """
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), data_only=True)
        ws = wb.worksheets[0]
        raw_rows = list(ws.iter_rows(values_only=True))
    except Exception as e:
        logger.error(f"Could not read uploaded spreadsheet: {e}")
        raise SpreadsheetParseError(f"Unsupported or corrupt spreadsheet: {e}") from e

    epoch = EXCEL_EPOCH_1904 if wb.epoch == CALENDAR_MAC_1904 else EXCEL_EPOCH_1900
    if not raw_rows:
        return []

    headers = [_cell_text(h) for h in raw_rows[0]]
    results = []

    for row_number, values in enumerate(raw_rows[1:], 2):
        if all(v is None or (isinstance(v, str) and not v.strip()) for v in values):
            continue

        record = {h: v for h, v in zip(headers, values) if h}
        results.append(ImportRow(
            row_number=row_number,
            account_id=_cell_text(record.get(COL_ACCOUNT_ID)),
            full_name=_cell_text(record.get(COL_NAME)),
            internal_nik=_cell_text(record.get(COL_NIK)),
            cert_type=_cell_text(record.get(COL_TYPE)),
            cert_name=_cell_text(record.get(COL_CERT_NAME)),
            cert_date=resolve_date(record.get(COL_CERT_DATE), epoch),
            notes=_cell_text(record.get(COL_NOTES)),
            file_link=_cell_text(record.get(COL_DRIVE_LINK)),
        ))

    valid = sum(1 for r in results if r.is_valid)
    logger.info(f"Parsed {len(results)} rows ({valid} valid)")
    return results


class CertificationImportService:
    """
    Framework-agnostic spreadsheet import/export for certification records.
    """

    def __init__(
        self,
        db_session: Session,
        progress_callback: Optional[Callable[[str, float, str], None]] = None,
        extra_template_rows: int = DEFAULT_EXTRA_TEMPLATE_ROWS,
        certification_service: Optional[CertificationService] = None,
        account_service: Optional[AccountService] = None
    ):
        """
        Initialize certification import service.

        Args:
            db_session: SQLAlchemy database session
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
            extra_template_rows: Blank rows formatted below the pre-filled employees
            certification_service: Record service used to create rows
            account_service: Employee directory used for the template
        """
        self.session = db_session
        self.progress_callback = progress_callback or (lambda *args: None)
        self.extra_template_rows = extra_template_rows
        self.certifications = certification_service or CertificationService(db_session)
        self.accounts = account_service or AccountService(db_session)

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    @staticmethod
    def template_filename(today: Optional[date] = None) -> str:
        return TEMPLATE_FILENAME.format(date=(today or date.today()).isoformat())

    def generate_template(self) -> Tuple[bytes, str]:
        """
        Build the import template workbook.

        One row is pre-filled per known employee (id, NIK, name); the
        certification-date column carries a date validation and a
        ``yyyy-mm-dd`` format for those rows plus ``extra_template_rows``
        spare rows.

        Returns:
            (xlsx bytes, download filename)
        """
        accounts = self.accounts.get_all()

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = TEMPLATE_SHEET_NAME

        ws.append(TEMPLATE_HEADERS)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for account in accounts:
            ws.append([account.id, account.internal_nik, account.full_name,
                       None, None, None, None, None])

        max_row = ws.max_row + self.extra_template_rows
        date_col = get_column_letter(CERT_DATE_COLUMN)

        validation = DataValidation(
            type='date',
            operator='greaterThan',
            formula1='DATE(1900,1,1)',
            allow_blank=True,
            showErrorMessage=True,
            errorTitle='Invalid date',
            error='Enter a valid date in YYYY-MM-DD format.'
        )
        ws.add_data_validation(validation)
        validation.add(f"{date_col}2:{date_col}{max_row}")

        for row_idx in range(2, max_row + 1):
            ws.cell(row=row_idx, column=CERT_DATE_COLUMN).number_format = 'yyyy-mm-dd'

        for idx, width in enumerate(TEMPLATE_COLUMN_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(idx)].width = width

        buffer = io.BytesIO()
        wb.save(buffer)

        filename = self.template_filename()
        logger.info(f"Generated template {filename} with {len(accounts)} employees")
        return buffer.getvalue(), filename

    def parse_upload(self, content: bytes) -> List[ImportRow]:
        """Parse an uploaded workbook into import rows (see ``parse_workbook``)."""
        return parse_workbook(content)

    def commit_import(self, rows: Sequence[ImportRow]) -> List[AccountCertification]:
        """
        Create a record for every valid row, sequentially and in row order.

        Each row is committed on its own. A failure stops the run; rows
        already committed are kept.

        Returns:
            The created records, in row order

        Raises:
            ImportCommitError: If a row could not be stored
        """
        valid_rows = [row for row in rows if row.is_valid]
        total = len(valid_rows)
        today = date.today()
        created = []

        self._emit_progress('commit', 0, f"Committing {total} rows...")

        for idx, row in enumerate(valid_rows):
            try:
                record = self.certifications.create({
                    'account_id': row.account_id,
                    'entry_date': today,
                    'cert_type': row.cert_type,
                    'cert_name': row.cert_name,
                    'cert_date': row.cert_date,
                    'notes': row.notes,
                    'file_id': extract_drive_id(row.file_link),
                })
            except Exception as e:
                logger.error(f"Import row {row.row_number} failed: {e}")
                raise ImportCommitError(len(created), row.row_number, e) from e

            created.append(record)
            self._emit_progress('commit', 100 * (idx + 1) / total,
                                f"Committed row {row.row_number}")

        logger.info(f"Import committed {len(created)} of {len(rows)} rows")
        return created
