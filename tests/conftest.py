"""
Pytest configuration and fixtures for the certification module tests.
"""

import io
import pytest
import openpyxl
from openpyxl.utils.datetime import CALENDAR_MAC_1904
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

from backend.models.schema import Base, Account
from services.certification_import_service import TEMPLATE_HEADERS
from services.drive_service import GoogleDriveService
from views.base import Notifier

# Load environment
load_dotenv()

DRIVE_FILE_ID = '1AbCdEfGhIjKlMnOpQrStUvWxYz1234567'


@pytest.fixture(scope='function')
def engine():
    """In-memory SQLite engine shared across threads (views run calls off-loop)."""
    eng = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)
    sess = Session()

    yield sess

    sess.close()


@pytest.fixture
def accounts(session):
    """Two employees in the directory."""
    budi = Account(full_name='Budi Santoso', internal_nik='NIK-001')
    siti = Account(full_name='Siti Rahmawati', internal_nik='NIK-002')
    session.add_all([budi, siti])
    session.commit()
    return [budi, siti]


class FakeDriveClient:
    """Stands in for the Drive v3 client: files().create(...).execute()."""

    def __init__(self, file_id=DRIVE_FILE_ID, error=None):
        self.file_id = file_id
        self.error = error
        self.uploads = []

    def files(self):
        return self

    def create(self, body, media_body, fields, supportsAllDrives):
        self.uploads.append({
            'body': body,
            'mime_type': media_body.mimetype(),
            'fields': fields,
            'supports_all_drives': supportsAllDrives
        })
        return self

    def execute(self):
        if self.error:
            raise self.error
        return {'id': self.file_id}


@pytest.fixture
def drive_client():
    return FakeDriveClient()


@pytest.fixture
def drive(drive_client):
    """Drive service wired to the fake client."""
    return GoogleDriveService(folder_id='folder-123', client=drive_client)


@pytest.fixture
def notifier():
    """Notifier that answers yes to every confirmation."""
    return Notifier(confirm_handler=lambda title, message: True)


@pytest.fixture
def declining_notifier():
    """Notifier that answers no to every confirmation."""
    return Notifier(confirm_handler=lambda title, message: False)


@pytest.fixture
def make_workbook():
    """Build xlsx bytes from data rows under the template headers."""

    def _make(rows, headers=TEMPLATE_HEADERS, date1904=False):
        wb = openpyxl.Workbook()
        if date1904:
            wb.epoch = CALENDAR_MAC_1904
        ws = wb.active
        ws.append(list(headers))
        for row in rows:
            ws.append(list(row))
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _make
