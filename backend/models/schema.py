"""
SQLAlchemy models for the certification records module.

This module defines the database schema using SQLAlchemy ORM,
matching the schema defined in Alembic migrations.
"""

import uuid
from sqlalchemy import (
    Column, Date, String, Text, TIMESTAMP, ForeignKey, Index, text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Account(Base):
    """Represents an employee. Read-only from the certification module."""

    __tablename__ = 'accounts'
    __table_args__ = (
        Index('idx_accounts_created_at', 'created_at'),
        {'comment': 'Employee directory'}
    )

    id = Column(
        String(36),
        primary_key=True,
        default=_new_uuid,
        nullable=False
    )
    full_name = Column(
        String(255),
        nullable=False,
        comment='Employee display name'
    )
    internal_nik = Column(
        String(50),
        nullable=True,
        comment='Internal employee number (NIK)'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )

    certifications = relationship('AccountCertification', back_populates='account')

    def __repr__(self):
        return f"<Account(id={self.id}, full_name='{self.full_name}')>"


class AccountCertification(Base):
    """Represents one certification entry linked to an employee."""

    __tablename__ = 'account_certifications'
    __table_args__ = (
        Index('idx_account_certifications_account', 'account_id'),
        Index('idx_account_certifications_entry_date', 'entry_date'),
        Index('idx_account_certifications_cert_type', 'cert_type'),
        {'comment': 'Employee certification records'}
    )

    id = Column(
        String(36),
        primary_key=True,
        default=_new_uuid,
        nullable=False
    )
    account_id = Column(
        String(36),
        ForeignKey('accounts.id', ondelete='CASCADE'),
        nullable=False,
        comment='Employee the certification belongs to'
    )
    entry_date = Column(
        Date,
        nullable=True,
        comment='Date the record was logged'
    )
    cert_type = Column(
        String(255),
        nullable=False,
        comment='Free-text certification category'
    )
    cert_name = Column(
        String(255),
        nullable=False,
        comment='Certification title'
    )
    cert_date = Column(
        Date,
        nullable=False,
        comment='Date of certification'
    )
    file_id = Column(
        String(255),
        nullable=True,
        comment='Google Drive file id of the certificate document'
    )
    notes = Column(
        Text,
        nullable=True
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False
    )

    account = relationship('Account', back_populates='certifications')

    def __repr__(self):
        return (f"<AccountCertification(id={self.id}, account_id={self.account_id}, "
                f"cert_name='{self.cert_name}')>")
