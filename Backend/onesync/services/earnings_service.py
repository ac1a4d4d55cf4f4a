import json
import logging
import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from onesync.core.exceptions import NotFoundException, OneSyncException, ValidationFailed
from onesync.models.payment import PaymentHistory
from onesync.models.royalty_advance import RoyaltyAdvance
from onesync.models.user import User
from onesync.models.withdrawal import WithdrawalRequest
from onesync.schemas.earnings import WithdrawalCreate
from onesync.services.intercom import IntercomService
from onesync.services.stripe_service import StripeService

logger = logging.getLogger(__name__)

RECENT_PAYMENTS = 10


async def list_payments(db: AsyncSession, user_id: uuid.UUID, limit: int = 100) -> List[PaymentHistory]:
    result = await db.execute(
        select(PaymentHistory)
        .where(PaymentHistory.user_id == user_id)
        .order_by(PaymentHistory.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_withdrawals(db: AsyncSession, user_id: uuid.UUID) -> List[WithdrawalRequest]:
    result = await db.execute(
        select(WithdrawalRequest)
        .where(WithdrawalRequest.user_id == user_id)
        .order_by(WithdrawalRequest.created_at.desc())
    )
    return list(result.scalars().all())


async def earnings_summary(db: AsyncSession, user: User) -> dict:
    return {
        "balances": user,
        "recent_payments": await list_payments(db, user.id, limit=RECENT_PAYMENTS),
        "withdrawals": await list_withdrawals(db, user.id),
    }


async def list_advances(db: AsyncSession, user_id: uuid.UUID) -> dict:
    result = await db.execute(
        select(RoyaltyAdvance)
        .where(RoyaltyAdvance.user_id == user_id)
        .order_by(RoyaltyAdvance.advance_date.desc())
    )
    advances = list(result.scalars().all())
    return {
        "advances": advances,
        "total_advanced": round(sum(a.amount for a in advances), 2),
        "total_repaid": round(sum(a.repaid_amount for a in advances), 2),
        "total_remaining": round(sum(a.remaining_balance for a in advances), 2),
    }


def validate_withdrawal(request: WithdrawalCreate, available_balance: float) -> None:
    if request.amount <= 0 or request.amount > available_balance:
        raise ValidationFailed("Invalid withdrawal amount")

    method = request.payment_method
    if method == "bank-transfer":
        if not request.routing_number or not request.account_number or not request.confirm_account_number:
            raise ValidationFailed("Please fill in all bank account fields")
        if request.account_number != request.confirm_account_number:
            raise ValidationFailed("Account numbers do not match")
    elif method == "paypal":
        if not request.paypal_email:
            raise ValidationFailed("Please enter your PayPal email address")
    elif method != "check" and not request.account_details:
        raise ValidationFailed("Please enter your account details")


async def start_stripe_payout(stripe: StripeService, user: User, request: WithdrawalCreate):
    """Try an automated bank payout. Returns (external account id, payout id); either may be None."""
    external_account_id = payout_id = None
    try:
        account = await stripe.create_external_account(
            account_holder_name=request.account_holder_name or user.name or "User",
            routing_number=request.routing_number,
            account_number=request.account_number,
            country="US",
            currency="usd",
        )
        external_account_id = account.get("id") if isinstance(account, dict) else None
        if external_account_id:
            payout = await stripe.create_payout(
                amount=round(request.amount * 100),
                destination=external_account_id,
                currency="usd",
                description=f"Withdrawal request for {request.amount} USD",
                method="standard",
            )
            payout_id = payout.get("id") if isinstance(payout, dict) else None
    except OneSyncException as e:
        logger.warning(f"Stripe payout failed for user {user.id}, falling back to manual processing: {e.detail}")
    return external_account_id, payout_id


async def request_withdrawal(
    db: AsyncSession,
    user_id: uuid.UUID,
    request: WithdrawalCreate,
    stripe: StripeService,
    intercom: IntercomService,
) -> dict:
    # Lock the profile row so two withdrawals cannot spend the same balance
    user = (await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )).scalar_one_or_none()
    if user is None:
        raise NotFoundException("User", str(user_id))

    validate_withdrawal(request, user.available_balance)

    if request.payment_method == "check":
        ticket = await intercom.create_conversation(
            user,
            "Check withdrawal request",
            f"I would like to request a check for {request.amount}. Please process this withdrawal request.",
        )
        logger.info(f"Check withdrawal of {request.amount} requested by {user.id} (ticket {ticket['ticketId']})")
        return {
            "success": True,
            "message": "Check request sent to support",
            "withdrawal": None,
            "support_ticket_id": ticket["ticketId"],
            "available_balance": user.available_balance,
        }

    external_account_id = payout_id = None
    if request.payment_method == "bank-transfer":
        external_account_id, payout_id = await start_stripe_payout(stripe, user, request)
        account_details = json.dumps({
            "routingNumber": request.routing_number,
            "accountNumber": request.account_number,
        })
    elif request.payment_method == "paypal":
        account_details = request.paypal_email
    else:
        account_details = request.account_details

    withdrawal = WithdrawalRequest(
        user_id=user.id,
        amount=request.amount,
        payment_method=request.payment_method,
        account_details=account_details,
        status="processing" if payout_id else "pending",
        stripe_external_account_id=external_account_id,
        stripe_payout_id=payout_id,
    )
    db.add(withdrawal)
    user.available_balance = user.available_balance - request.amount
    await db.commit()

    logger.info(f"Withdrawal {withdrawal.id} of {request.amount} via {request.payment_method} ({withdrawal.status})")
    message = (
        "Withdrawal request submitted and is being processed through Stripe!"
        if payout_id else "Withdrawal request submitted successfully!"
    )
    return {
        "success": True,
        "message": message,
        "withdrawal": withdrawal,
        "support_ticket_id": None,
        "available_balance": user.available_balance,
    }
