"""
Certification Service - CRUD façade over the account_certifications table.

This module translates application-level operations (list, get, create,
update, delete, distinct categories) into SQLAlchemy queries. It holds no
state of its own besides the session it was given.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from backend.models.schema import AccountCertification
from services.exceptions import RecordNotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Writable columns of a certification record
CERTIFICATION_FIELDS = (
    'account_id', 'entry_date', 'cert_type', 'cert_name',
    'cert_date', 'file_id', 'notes'
)
REQUIRED_FIELDS = ('account_id', 'cert_type', 'cert_name', 'cert_date')
DATE_FIELDS = ('entry_date', 'cert_date')

ISO_DATE_PATTERN = re.compile(r'(\d{4}-\d{2}-\d{2})(?:T[0-9:.]*(?:Z|[+-]\d{2}:?\d{2})?)?', re.ASCII)


def sanitize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace empty-string and None values with an explicit None.

    Every other value is passed through untouched.
    """
    return {
        key: None if value is None or value == '' else value
        for key, value in payload.items()
    }


def parse_iso_date(text: Any) -> Optional[date]:
    """
    Parse ``YYYY-MM-DD`` text, optionally followed by a ``T`` time part.

    Returns None for anything else (including trailing junk).
    """
    match = ISO_DATE_PATTERN.fullmatch(str(text).strip())
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def _coerce_date(field: str, value: Any) -> Optional[date]:
    """Turn an ISO date string (or datetime) into a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValidationError([field], reason='Invalid date (expected YYYY-MM-DD)')
    return parsed


def summarize_records(records: List[AccountCertification],
                      today: Optional[date] = None) -> Dict[str, int]:
    """Count all records and those entered in the current calendar month."""
    today = today or date.today()
    this_month = sum(
        1 for r in records
        if r.entry_date and r.entry_date.year == today.year and r.entry_date.month == today.month
    )
    return {'total': len(records), 'this_month': this_month}


class CertificationService:
    """
    Framework-agnostic service for certification records.

    Used by the API routers, the CLI and the presentation views.
    """

    def __init__(self, db_session: Session):
        """
        Initialize certification service.

        Args:
            db_session: SQLAlchemy database session
        """
        self.session = db_session

    def _prepare(self, data: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(data) - set(CERTIFICATION_FIELDS)
        if unknown:
            logger.debug(f"Ignoring unknown certification fields: {sorted(unknown)}")

        payload = sanitize_payload({k: v for k, v in data.items() if k in CERTIFICATION_FIELDS})
        for field in DATE_FIELDS:
            if field in payload:
                payload[field] = _coerce_date(field, payload[field])
        return payload

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Database commit failed: {e}")
            self.session.rollback()
            raise

    def list_all(self) -> List[AccountCertification]:
        """
        Fetch every record joined with its employee, newest entry first.
        """
        return (
            self.session.query(AccountCertification)
            .options(joinedload(AccountCertification.account))
            .order_by(AccountCertification.entry_date.desc())
            .all()
        )

    def list_for_account(self, account_id: str) -> List[AccountCertification]:
        """Fetch one employee's records, most recent certification first."""
        return (
            self.session.query(AccountCertification)
            .filter_by(account_id=account_id)
            .order_by(AccountCertification.cert_date.desc())
            .all()
        )

    def get(self, record_id: str) -> AccountCertification:
        record = (
            self.session.query(AccountCertification)
            .options(joinedload(AccountCertification.account))
            .filter_by(id=record_id)
            .first()
        )
        if not record:
            raise RecordNotFoundError(record_id)
        return record

    def list_distinct_types(self) -> List[str]:
        """
        Return the known certification categories.

        Empty values are dropped, duplicates removed and the result sorted
        alphabetically. Used to power category autocomplete.
        """
        rows = self.session.query(AccountCertification.cert_type).all()
        types = {row[0] for row in rows if row[0]}
        return sorted(types)

    def create(self, data: Dict[str, Any]) -> AccountCertification:
        """
        Create a certification record.

        Args:
            data: Field values; missing and blank fields are stored as NULL

        Returns:
            The stored record

        Raises:
            ValidationError: If a required field is missing (no query is issued)
        """
        payload = self._prepare({field: data.get(field) for field in CERTIFICATION_FIELDS})

        missing = [field for field in REQUIRED_FIELDS if payload.get(field) is None]
        if missing:
            raise ValidationError(missing)

        record = AccountCertification(**payload)
        self.session.add(record)
        self._commit()
        self.session.refresh(record)

        logger.info(f"Created certification {record.id} for account {record.account_id}")
        return record

    def update(self, record_id: str, data: Dict[str, Any]) -> AccountCertification:
        """
        Update the supplied fields of a record.

        Keys not present in ``data`` are left as they are.
        """
        payload = self._prepare(data)

        cleared = [field for field in REQUIRED_FIELDS if field in payload and payload[field] is None]
        if cleared:
            raise ValidationError(cleared)

        record = self.session.query(AccountCertification).filter_by(id=record_id).first()
        if not record:
            raise RecordNotFoundError(record_id)

        for field, value in payload.items():
            setattr(record, field, value)
        self._commit()
        self.session.refresh(record)

        logger.info(f"Updated certification {record_id}: {sorted(payload)}")
        return record

    def attach_file(self, record_id: str, file_id: str) -> AccountCertification:
        """Store a Drive file reference on an existing record."""
        return self.update(record_id, {'file_id': file_id})

    def delete(self, record_id: str) -> bool:
        """
        Permanently delete a record.

        Returns:
            True once the record is gone

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        record = self.session.query(AccountCertification).filter_by(id=record_id).first()
        if not record:
            raise RecordNotFoundError(record_id)

        self.session.delete(record)
        self._commit()

        logger.info(f"Deleted certification {record_id}")
        return True
