import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query

from onesync.services.stripe_service import StripeService, get_stripe_service
from onesync.schemas.integrations import ActionRequest, ProxyResponse
from onesync.models.user import User
from onesync.core.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments")

@router.post("/stripe", response_model=ProxyResponse)
async def stripe_action(
    request: ActionRequest,
    stripe: StripeService = Depends(get_stripe_service),
    current_user: User = Depends(get_current_user)
):
    """Run a Stripe action (`list_payouts`, `create_payout`, `get_balance`, ...)."""
    logger.info(f"Stripe action '{request.action}' for user {current_user.id}")
    data = await stripe.run(request.action, request.params)
    return ProxyResponse(success=True, data=data)


@router.get("/subscriptions/{subscription_id}")
async def get_subscription(
    subscription_id: str,
    stripe: StripeService = Depends(get_stripe_service),
    current_user: User = Depends(get_current_user)
):
    return {"subscription": await stripe.get_subscription(subscription_id)}


@router.get("/payouts", response_model=ProxyResponse)
async def list_stripe_payouts(
    status: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    stripe: StripeService = Depends(get_stripe_service),
    current_user: User = Depends(get_current_user)
):
    data = await stripe.list_payouts(status=status, limit=limit)
    return ProxyResponse(success=True, data=data)
