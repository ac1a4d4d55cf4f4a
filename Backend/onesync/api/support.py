from fastapi import APIRouter, Depends, status

from onesync.services.intercom import IntercomService, get_intercom_service
from onesync.schemas.integrations import SupportTicketRequest, SupportTicketResult, UnreadCount
from onesync.models.user import User
from onesync.core.security import get_current_user

router = APIRouter(prefix="/support")

@router.post("/tickets", response_model=SupportTicketResult, status_code=status.HTTP_201_CREATED)
async def create_support_ticket(
    request: SupportTicketRequest,
    intercom: IntercomService = Depends(get_intercom_service),
    current_user: User = Depends(get_current_user)
):
    return await intercom.create_release_ticket(request.release_data, current_user)


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    intercom: IntercomService = Depends(get_intercom_service),
    current_user: User = Depends(get_current_user)
):
    # Always 200; upstream trouble is reported in the body
    return await intercom.unread_count(current_user.id)
