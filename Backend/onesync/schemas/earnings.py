from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from uuid import UUID
from datetime import date, datetime

class PaymentResponse(BaseModel):
    id: UUID
    track_id: Optional[UUID] = None
    amount: float
    platform: str
    status: str
    reference: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class WithdrawalCreate(BaseModel):
    amount: float
    payment_method: str
    # bank-transfer
    account_holder_name: Optional[str] = None
    routing_number: Optional[str] = None
    account_number: Optional[str] = None
    confirm_account_number: Optional[str] = None
    # paypal
    paypal_email: Optional[str] = None
    # anything else
    account_details: Optional[str] = None

class WithdrawalResponse(BaseModel):
    id: UUID
    amount: float
    payment_method: str
    account_details: Optional[str] = None
    status: str
    stripe_external_account_id: Optional[str] = None
    stripe_payout_id: Optional[str] = None
    trolley_recipient_id: Optional[str] = None
    trolley_payout_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class WithdrawalResult(BaseModel):
    success: bool
    message: str
    withdrawal: Optional[WithdrawalResponse] = None
    support_ticket_id: Optional[str] = None
    available_balance: float

class Balances(BaseModel):
    total_earnings: float
    available_balance: float
    pending_payments: float

    model_config = ConfigDict(from_attributes=True)

class EarningsSummary(BaseModel):
    balances: Balances
    recent_payments: List[PaymentResponse]
    withdrawals: List[WithdrawalResponse]

class Repayment(BaseModel):
    amount: float
    date: date
    payout_id: Optional[str] = None
    description: Optional[str] = None

class RoyaltyAdvanceResponse(BaseModel):
    id: UUID
    amount: float
    currency: str
    advance_date: date
    description: Optional[str] = None
    status: str
    repayments: List[Repayment] = []
    repaid_amount: float
    remaining_balance: float

    model_config = ConfigDict(from_attributes=True)

class RoyaltyAdvanceList(BaseModel):
    advances: List[RoyaltyAdvanceResponse]
    total_advanced: float
    total_repaid: float
    total_remaining: float
