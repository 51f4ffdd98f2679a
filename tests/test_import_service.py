"""
Tests for the spreadsheet import/export service.

Tests cover date resolution, Drive link parsing, template generation,
upload parsing and the sequential commit.
"""

import io
import pytest
import openpyxl
from datetime import date, datetime
from sqlalchemy.exc import SQLAlchemyError

from backend.models.schema import AccountCertification
from services.certification_import_service import (
    CertificationImportService, ImportRow, TEMPLATE_HEADERS, TEMPLATE_SHEET_NAME,
    EXCEL_EPOCH_1904, excel_serial_to_date, extract_drive_id, resolve_date
)
from services.certification_service import CertificationService
from services.exceptions import ImportCommitError, SpreadsheetParseError

DRIVE_LINK = 'https://drive.google.com/file/d/1AbCdEfGhIjKlMnOpQrStUvWxYz1234567/view'


class TestDateResolution:
    """Test spreadsheet date handling."""

    def test_serial_to_date(self):
        assert excel_serial_to_date(44197) == date(2021, 1, 1)
        assert excel_serial_to_date(25569) == date(1970, 1, 1)

    def test_serial_with_time_fraction(self):
        assert excel_serial_to_date(44197.75) == date(2021, 1, 1)

    def test_serial_1904_system(self):
        assert excel_serial_to_date(0, EXCEL_EPOCH_1904) == date(1904, 1, 1)
        assert excel_serial_to_date(42735, EXCEL_EPOCH_1904) == date(2021, 1, 1)

    def test_resolve_date_inputs(self):
        assert resolve_date(44197) == '2021-01-01'
        assert resolve_date(datetime(2024, 5, 1, 13, 30)) == '2024-05-01'
        assert resolve_date(date(2024, 5, 1)) == '2024-05-01'
        assert resolve_date(' 2023-07-04 ') == '2023-07-04'

    def test_resolve_date_unusable_inputs(self):
        assert resolve_date(None) is None
        assert resolve_date('') is None
        assert resolve_date('next tuesday') is None
        assert resolve_date(True) is None
        assert resolve_date('2024-01-01junk') is None
        assert resolve_date('01/02/2024') is None

    def test_resolve_date_timestamp_text(self):
        assert resolve_date('2024-01-01T10:00:00') == '2024-01-01'


class TestDriveLinks:
    """Test Drive id extraction from sharing links."""

    def test_file_link(self):
        assert extract_drive_id(DRIVE_LINK) == '1AbCdEfGhIjKlMnOpQrStUvWxYz1234567'

    def test_open_link(self):
        link = 'https://drive.google.com/open?id=1AbCdEfGhIjKlMnOpQrStUvWxYz-_89'
        assert extract_drive_id(link) == '1AbCdEfGhIjKlMnOpQrStUvWxYz-_89'

    def test_no_id(self):
        assert extract_drive_id('https://drive.google.com/drive/my-drive') is None
        assert extract_drive_id('') is None
        assert extract_drive_id(None) is None


class TestImportRow:
    """Test row validity."""

    def test_valid_when_required_fields_present(self):
        row = ImportRow(row_number=2, account_id='a1', cert_type='K3',
                        cert_name='Ahli K3', cert_date='2024-01-01')
        assert row.is_valid is True
        assert row.to_dict()['is_valid'] is True

    @pytest.mark.parametrize('missing', ['account_id', 'cert_type', 'cert_name', 'cert_date'])
    def test_invalid_when_required_field_missing(self, missing):
        fields = dict(account_id='a1', cert_type='K3', cert_name='Ahli K3', cert_date='2024-01-01')
        fields[missing] = None
        assert ImportRow(row_number=2, **fields).is_valid is False

    @pytest.mark.parametrize('cert_date', ['01/02/2024', '2024-01-01junk', '2024-02-30'])
    def test_invalid_when_date_not_iso(self, cert_date):
        row = ImportRow(row_number=2, account_id='a1', cert_type='K3',
                        cert_name='Ahli K3', cert_date=cert_date)
        assert row.is_valid is False
        assert row.to_dict()['is_valid'] is False


class TestTemplate:
    """Test template workbook generation."""

    def test_filename(self):
        name = CertificationImportService.template_filename(date(2026, 10, 16))
        assert name == 'HUREMA_Certification_Template_2026-10-16.xlsx'

    def test_template_prefilled_with_accounts(self, session, accounts):
        service = CertificationImportService(session, extra_template_rows=10)

        content, filename = service.generate_template()

        assert filename == CertificationImportService.template_filename()
        wb = openpyxl.load_workbook(io.BytesIO(content))
        ws = wb.worksheets[0]
        assert ws.title == TEMPLATE_SHEET_NAME

        rows = list(ws.iter_rows(min_row=1, max_row=3, values_only=True))
        assert list(rows[0]) == TEMPLATE_HEADERS
        assert ws['A1'].font.bold is True

        prefilled = {(r[0], r[1], r[2]) for r in rows[1:]}
        assert prefilled == {(a.id, a.internal_nik, a.full_name) for a in accounts}
        assert all(v is None for r in rows[1:] for v in r[3:])

    def test_template_date_column_formatting(self, session, accounts):
        service = CertificationImportService(session, extra_template_rows=10)

        content, _ = service.generate_template()

        ws = openpyxl.load_workbook(io.BytesIO(content)).worksheets[0]
        validations = ws.data_validations.dataValidation
        assert len(validations) == 1
        assert validations[0].type == 'date'
        assert str(validations[0].sqref) == 'F2:F13'
        assert ws['F2'].number_format == 'yyyy-mm-dd'
        assert ws['F13'].number_format == 'yyyy-mm-dd'
        assert ws.column_dimensions['E'].width == 30

    def test_template_without_accounts(self, session):
        content, _ = CertificationImportService(session).generate_template()

        ws = openpyxl.load_workbook(io.BytesIO(content)).worksheets[0]
        assert [c.value for c in ws[1]] == TEMPLATE_HEADERS
        assert ws['A2'].value is None


class TestParseUpload:
    """Test parsing uploaded workbooks."""

    def test_parse_rows(self, session, make_workbook):
        content = make_workbook([
            ['acc-1', 1001, 'Budi Santoso', 'K3 Umum', 'Ahli K3', datetime(2024, 5, 1), 'note', DRIVE_LINK],
            ['acc-2', 'NIK-002', 'Siti Rahmawati', None, 'Auditor', 44197, None, None],
            [None, None, None, None, None, None, None, None],
            ['acc-3', None, None, 'ISO', 'ISO 9001', '2023-07-04', '  ', None],
        ])

        rows = CertificationImportService(session).parse_upload(content)

        assert [r.row_number for r in rows] == [2, 3, 5]
        first, second, third = rows
        assert first.internal_nik == '1001'
        assert first.cert_date == '2024-05-01'
        assert first.file_link == DRIVE_LINK
        assert first.is_valid
        assert second.cert_date == '2021-01-01'
        assert not second.is_valid
        assert third.notes is None
        assert third.is_valid

    def test_columns_matched_by_header(self, session, make_workbook):
        headers = list(reversed(TEMPLATE_HEADERS))
        values = ['acc-1', None, 'Budi', 'K3', 'Ahli K3', '2024-01-02', None, None]
        content = make_workbook([list(reversed(values))], headers=headers)

        rows = CertificationImportService(session).parse_upload(content)

        assert rows[0].account_id == 'acc-1'
        assert rows[0].cert_date == '2024-01-02'

    def test_unparseable_date_makes_row_invalid(self, session, make_workbook):
        content = make_workbook([['acc-1', None, None, 'K3', 'Ahli K3', '31/12/2024', None, None]])

        rows = CertificationImportService(session).parse_upload(content)

        assert rows[0].cert_date is None
        assert not rows[0].is_valid

    def test_1904_workbook(self, session, make_workbook):
        content = make_workbook([['acc-1', None, None, 'K3', 'Ahli K3', 42735, None, None]],
                                date1904=True)

        rows = CertificationImportService(session).parse_upload(content)

        assert rows[0].cert_date == '2021-01-01'

    def test_header_only(self, session, make_workbook):
        assert CertificationImportService(session).parse_upload(make_workbook([])) == []

    def test_not_a_spreadsheet(self, session):
        with pytest.raises(SpreadsheetParseError):
            CertificationImportService(session).parse_upload(b'this is not a workbook')


class FailingCertificationService(CertificationService):
    """Fails on the n-th create."""

    def __init__(self, db_session, fail_on):
        super().__init__(db_session)
        self.fail_on = fail_on
        self.calls = 0

    def create(self, data):
        self.calls += 1
        if self.calls == self.fail_on:
            raise SQLAlchemyError('connection lost')
        return super().create(data)


def import_rows(accounts):
    return [
        ImportRow(row_number=2, account_id=accounts[0].id, cert_type='K3',
                  cert_name='First', cert_date='2024-01-01', file_link=DRIVE_LINK),
        ImportRow(row_number=3, account_id=accounts[0].id, cert_type=None,
                  cert_name='Skipped', cert_date='2024-01-01'),
        ImportRow(row_number=4, account_id=accounts[1].id, cert_type='ISO',
                  cert_name='Second', cert_date='2024-02-01', notes='renewal'),
    ]


class TestCommitImport:
    """Test committing parsed rows."""

    def test_only_valid_rows_created_in_order(self, session, accounts):
        events = []
        service = CertificationImportService(
            session, progress_callback=lambda stage, pct, msg: events.append(pct)
        )

        created = service.commit_import(import_rows(accounts))

        assert [r.cert_name for r in created] == ['First', 'Second']
        assert all(r.entry_date == date.today() for r in created)
        assert created[0].file_id == '1AbCdEfGhIjKlMnOpQrStUvWxYz1234567'
        assert created[1].file_id is None
        assert created[1].notes == 'renewal'
        assert session.query(AccountCertification).count() == 2
        assert events == [0, 50.0, 100.0]

    def test_no_valid_rows(self, session, accounts):
        rows = [ImportRow(row_number=2, account_id=accounts[0].id)]

        assert CertificationImportService(session).commit_import(rows) == []
        assert session.query(AccountCertification).count() == 0

    def test_failure_stops_and_keeps_committed_rows(self, session, accounts):
        service = CertificationImportService(
            session, certification_service=FailingCertificationService(session, fail_on=2)
        )

        with pytest.raises(ImportCommitError) as exc_info:
            service.commit_import(import_rows(accounts))

        assert exc_info.value.committed == 1
        assert exc_info.value.row_number == 4
        assert [r.cert_name for r in session.query(AccountCertification).all()] == ['First']

    def test_rows_with_unusable_dates_skipped(self, session, accounts):
        rows = [
            ImportRow(row_number=2, account_id=accounts[0].id, cert_type='K3',
                      cert_name='Kept', cert_date='2024-01-01'),
            ImportRow(row_number=3, account_id=accounts[0].id, cert_type='K3',
                      cert_name='Edited by hand', cert_date='01/02/2024'),
        ]

        created = CertificationImportService(session).commit_import(rows)

        assert [r.cert_name for r in created] == ['Kept']
        assert session.query(AccountCertification).count() == 1
