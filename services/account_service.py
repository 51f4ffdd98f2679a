"""
Account Service - Read-only access to the employee directory.
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from backend.models.schema import Account

logger = logging.getLogger(__name__)


class AccountService:
    """Employee directory lookups for pickers and import templates."""

    def __init__(self, db_session: Session):
        self.session = db_session

    def get_all(self) -> List[Account]:
        """Return every employee, newest first."""
        accounts = self.session.query(Account).order_by(Account.created_at.desc()).all()
        logger.debug(f"Loaded {len(accounts)} accounts")
        return accounts

    def get(self, account_id: str):
        return self.session.query(Account).filter_by(id=account_id).first()
