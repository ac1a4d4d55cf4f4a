from fastapi import APIRouter, Depends, status

from onesync.services.trolley import TrolleyService, get_trolley_service
from onesync.schemas.integrations import TrolleyRecipientCreate, TrolleyBatchCreate
from onesync.models.user import User
from onesync.core.security import get_current_user

router = APIRouter(prefix="/payouts")

# Static routes first
@router.post("/recipients", status_code=status.HTTP_201_CREATED)
async def create_recipient(
    recipient: TrolleyRecipientCreate,
    trolley: TrolleyService = Depends(get_trolley_service),
    current_user: User = Depends(get_current_user)
):
    return await trolley.create_recipient(recipient.email, recipient.firstName, recipient.lastName)

@router.get("/recipients/{recipient_id}")
async def get_recipient(
    recipient_id: str,
    trolley: TrolleyService = Depends(get_trolley_service),
    current_user: User = Depends(get_current_user)
):
    return await trolley.get_recipient(recipient_id)

@router.post("/batches", status_code=status.HTTP_201_CREATED)
async def create_batch(
    batch: TrolleyBatchCreate,
    trolley: TrolleyService = Depends(get_trolley_service),
    current_user: User = Depends(get_current_user)
):
    """Send one Trolley batch; amounts go out as strings, currency defaults to USD."""
    return await trolley.create_batch([p.model_dump() for p in batch.payouts])

@router.get("/batches/{batch_id}")
async def get_batch(
    batch_id: str,
    trolley: TrolleyService = Depends(get_trolley_service),
    current_user: User = Depends(get_current_user)
):
    return await trolley.get_batch(batch_id)

# Dynamic routes after static ones
@router.get("/{payout_id}")
async def get_payout(
    payout_id: str,
    trolley: TrolleyService = Depends(get_trolley_service),
    current_user: User = Depends(get_current_user)
):
    return await trolley.get_payout(payout_id)
