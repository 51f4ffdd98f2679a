"""
Drive Service - Certificate document storage on Google Drive.

Files are uploaded with a service account into a shared folder; records only
keep the returned Drive file id.
"""

import io
import logging
import mimetypes
import threading
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from services.exceptions import DriveUploadError

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ['https://www.googleapis.com/auth/drive']
TOKEN_URI = 'https://oauth2.googleapis.com/token'
FILE_URL_TEMPLATE = 'https://lh3.googleusercontent.com/d/{file_id}=s1600'


def clean_private_key(private_key: str) -> str:
    """Undo the quoting and escaped newlines private keys pick up in env files."""
    key = private_key.strip().strip('"').strip("'")
    return key.replace('\\n', '\n')


class GoogleDriveService:
    """
    Upload files to Google Drive and build their public URLs.
    """

    def __init__(
        self,
        service_account_email: Optional[str] = None,
        private_key: Optional[str] = None,
        folder_id: Optional[str] = None,
        client=None
    ):
        """
        Initialize drive service.

        Args:
            service_account_email: Service account client email
            private_key: Service account PEM private key
            folder_id: Drive folder that receives uploads
            client: Prebuilt Drive v3 client (skips credential setup)
        """
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.folder_id = folder_id
        self._client = client
        self._local = threading.local()

    def _get_client(self):
        """Injected client, or one built per calling thread."""
        if self._client is not None:
            return self._client
        if getattr(self._local, 'client', None) is not None:
            return self._local.client

        if not self.service_account_email or not self.private_key:
            raise DriveUploadError("Google service account credentials are not configured")

        try:
            credentials = service_account.Credentials.from_service_account_info(
                {
                    'type': 'service_account',
                    'client_email': self.service_account_email,
                    'private_key': clean_private_key(self.private_key),
                    'token_uri': TOKEN_URI,
                },
                scopes=DRIVE_SCOPES
            )
        except ValueError as e:
            raise DriveUploadError(f"Invalid service account private key: {e}") from e

        self._local.client = build('drive', 'v3', credentials=credentials, cache_discovery=False)
        return self._local.client

    def upload_file(self, filename: str, content: bytes, mime_type: Optional[str] = None) -> str:
        """
        Upload a file and return its Drive id.

        Raises:
            DriveUploadError: If the upload fails or no id comes back
        """
        mime_type = mime_type or mimetypes.guess_type(filename)[0] or 'application/octet-stream'
        metadata = {'name': filename}
        if self.folder_id:
            metadata['parents'] = [self.folder_id]

        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)

        try:
            result = self._get_client().files().create(
                body=metadata,
                media_body=media,
                fields='id',
                supportsAllDrives=True
            ).execute()
        except HttpError as e:
            logger.error(f"Drive upload failed for {filename}: {e}")
            raise DriveUploadError(f"Drive upload failed: {e}") from e
        except (GoogleAuthError, OSError) as e:
            logger.error(f"Drive unreachable or credentials rejected for {filename}: {e}")
            raise DriveUploadError(f"Drive upload failed: {e}") from e

        file_id = (result or {}).get('id')
        if not file_id:
            raise DriveUploadError("Drive response did not include a file id")

        logger.info(f"Uploaded {filename} ({len(content)} bytes) to Drive as {file_id}")
        return file_id

    def get_file_url(self, file_id: str) -> str:
        return FILE_URL_TEMPLATE.format(file_id=file_id)
