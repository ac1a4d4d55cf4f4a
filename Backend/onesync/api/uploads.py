import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services.storage import ObjectStorage, get_storage
from onesync.services.intercom import IntercomService, get_intercom_service
from onesync.services.upload_service import upload_release
from onesync.schemas.release import ReleaseUploadResponse
from onesync.models.user import User
from onesync.core.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/uploads/release", response_model=ReleaseUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_new_release(
    metadata: str = Form(...),
    audio_files: List[UploadFile] = File(...),
    artwork: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    intercom: IntercomService = Depends(get_intercom_service),
    current_user: User = Depends(get_current_user)
):
    """
    Multipart release upload.

    `metadata` is the JSON release form; `audio_files` carries one file per
    track in track order, and `artwork` is the optional cover image.
    """
    release, ticket_id = await upload_release(
        db, storage, intercom, current_user, metadata, audio_files, artwork
    )
    return ReleaseUploadResponse(release=release, support_ticket_id=ticket_id)
