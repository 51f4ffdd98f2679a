"""
Presentation views for the certification module.

Each view owns only transient UI state and talks to the service layer.
"""

from views.base import (
    AccountRow, CertificationRow, LocalFile, Notification, NotificationLevel, Notifier, ServiceGate
)
from views.form_view import CertificationFormView
from views.import_wizard import ImportWizard, WizardStep
from views.list_view import CertificationListView

__all__ = [
    'AccountRow',
    'CertificationRow',
    'LocalFile',
    'Notification',
    'NotificationLevel',
    'Notifier',
    'ServiceGate',
    'CertificationFormView',
    'ImportWizard',
    'WizardStep',
    'CertificationListView',
]
