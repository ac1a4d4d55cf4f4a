from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services.notification_service import get_notifications
from onesync.schemas.notification import NotificationList
from onesync.models.user import User
from onesync.core.security import get_current_user

router = APIRouter()

@router.get("/notifications", response_model=NotificationList)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Notifications derived from recent tracks and payments. Nothing is stored."""
    return await get_notifications(db, current_user.id)
