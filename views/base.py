"""
Shared pieces for the presentation views.

Views never render anything themselves; they report outcomes through a
``Notifier`` (the blocking alert / confirmation dialog of the UI) and
receive picked files as ``LocalFile`` objects.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Icon/severity of an alert."""
    SUCCESS = 'success'
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'
    QUESTION = 'question'


@dataclass
class Notification:
    level: NotificationLevel
    title: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class LocalFile:
    """A file picked by the user in a file input."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


class Notifier:
    """
    Blocking notifications for the views.

    Every alert and confirmation is kept in ``history``. Confirmation
    answers come from ``confirm_handler``; without one, nothing is
    confirmed.
    """

    def __init__(self, confirm_handler: Optional[Callable[[str, str], bool]] = None):
        self.confirm_handler = confirm_handler
        self.history: List[Notification] = []

    def alert(self, level: NotificationLevel, title: str, message: str):
        self.history.append(Notification(level, title, message))
        log_level = logging.ERROR if level == NotificationLevel.ERROR else logging.INFO
        logger.log(log_level, f"[{level.value}] {title}: {message}")

    def confirm(self, title: str, message: str) -> bool:
        self.history.append(Notification(NotificationLevel.QUESTION, title, message))
        answer = bool(self.confirm_handler and self.confirm_handler(title, message))
        logger.info(f"Confirm '{title}': {'yes' if answer else 'no'}")
        return answer

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None


class ServiceGate:
    """
    Runs the blocking service calls of one view tree off the event loop.

    Calls are serialized: the views of a tree share one database session
    and one Drive client, so at most one call is on a worker thread at a
    time. The list view hands its gate to the form and wizard it opens.
    """

    def __init__(self):
        self._loop = None
        self._lock = None

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._loop, self._lock = loop, asyncio.Lock()
        return self._lock

    async def run(self, func: Callable, *args) -> Any:
        async with self._get_lock():
            return await asyncio.to_thread(func, *args)


@dataclass(frozen=True)
class AccountRow:
    """Detached employee display fields."""
    id: str
    full_name: str
    internal_nik: Optional[str] = None

    @classmethod
    def from_record(cls, account: Any) -> 'AccountRow':
        return cls(account.id, account.full_name, account.internal_nik)


@dataclass(frozen=True)
class CertificationRow:
    """
    Detached copy of a certification as shown in the views.

    Built on the worker thread, so later commits on the shared session
    never trigger lazy loads from the event loop.
    """
    id: str
    account_id: str
    cert_type: str
    cert_name: str
    cert_date: Optional[date]
    entry_date: Optional[date] = None
    file_id: Optional[str] = None
    notes: Optional[str] = None
    account: Optional[AccountRow] = None

    @classmethod
    def from_record(cls, record: Any) -> 'CertificationRow':
        account = record.account
        return cls(
            id=record.id,
            account_id=record.account_id,
            cert_type=record.cert_type,
            cert_name=record.cert_name,
            cert_date=record.cert_date,
            entry_date=record.entry_date,
            file_id=record.file_id,
            notes=record.notes,
            account=AccountRow.from_record(account) if account is not None else None
        )


def iso_date(value: Any) -> str:
    """Render a date-ish value for a form input; blanks become ''."""
    if value is None:
        return ''
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)
