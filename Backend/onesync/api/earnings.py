import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services import earnings_service
from onesync.services.stripe_service import StripeService, get_stripe_service
from onesync.services.intercom import IntercomService, get_intercom_service
from onesync.schemas.earnings import (
    EarningsSummary,
    PaymentResponse,
    WithdrawalCreate,
    WithdrawalResponse,
    WithdrawalResult,
    RoyaltyAdvanceList,
)
from onesync.models.user import User
from onesync.core.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/earnings")

@router.get("/summary", response_model=EarningsSummary)
async def get_earnings_summary(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await earnings_service.earnings_summary(db, current_user)


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await earnings_service.list_payments(db, current_user.id)


@router.get("/withdrawals", response_model=List[WithdrawalResponse])
async def list_withdrawals(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await earnings_service.list_withdrawals(db, current_user.id)


@router.post("/withdrawals", response_model=WithdrawalResult, status_code=status.HTTP_201_CREATED)
async def request_withdrawal(
    request: WithdrawalCreate,
    db: AsyncSession = Depends(get_db),
    stripe: StripeService = Depends(get_stripe_service),
    intercom: IntercomService = Depends(get_intercom_service),
    current_user: User = Depends(get_current_user)
):
    """
    Request a withdrawal from the available balance.

    Bank transfers try an automated Stripe payout first. Checks are handled
    by support and create no withdrawal row.
    """
    return await earnings_service.request_withdrawal(db, current_user.id, request, stripe, intercom)


@router.get("/advances", response_model=RoyaltyAdvanceList)
async def list_royalty_advances(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await earnings_service.list_advances(db, current_user.id)
