"""
Accounts router - Employee directory lookups for the certification module.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_account_service, get_certification_service
from api.schemas.certification_schema import AccountSummary, CertificationResponse
from services.account_service import AccountService
from services.certification_service import CertificationService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/accounts', tags=['accounts'])


@router.get('', response_model=List[AccountSummary])
async def list_accounts(
    accounts: AccountService = Depends(get_account_service)
):
    """Every employee, newest first. Feeds the employee picker."""
    return accounts.get_all()


@router.get('/{account_id}/certifications', response_model=List[CertificationResponse])
async def list_account_certifications(
    account_id: str,
    accounts: AccountService = Depends(get_account_service),
    certifications: CertificationService = Depends(get_certification_service)
):
    """
    One employee's certifications, most recent certification date first.
    """
    if not accounts.get(account_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account {account_id} not found"
        )

    return certifications.list_for_account(account_id)
