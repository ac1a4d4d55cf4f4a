import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services import catalog_service
from onesync.schemas.track import TrackResponse
from onesync.models.user import User
from onesync.core.security import get_current_user

router = APIRouter()

# Static routes first
@router.get("/catalog/platforms")
async def list_platforms():
    """Distribution platforms a release can target"""
    return catalog_service.PLATFORMS

@router.get("/tracks", response_model=List[TrackResponse])
async def list_tracks(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await catalog_service.list_tracks(db, current_user.id, status)

@router.get("/tracks/{track_id}", response_model=TrackResponse)
async def read_track(
    track_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await catalog_service.get_track(db, current_user.id, track_id)
