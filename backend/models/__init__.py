"""Models package for the certification records module."""
from backend.models.schema import Base, Account, AccountCertification

__all__ = ['Base', 'Account', 'AccountCertification']
