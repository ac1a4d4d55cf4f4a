import logging
import uuid
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db, utcnow
from onesync.services.storage import AVATAR_BUCKET, ObjectStorage, build_object_key, get_storage
from onesync.models.user import User
from onesync.schemas.user import ProfileResponse, ProfileUpdate, OnboardingData, UserPasswordUpdate
from onesync.core.config import settings
from onesync.core.security import get_password_hash, get_current_user, verify_password
from onesync.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/profile", response_model=ProfileResponse)
async def read_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update_data = profile_data.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationFailed("Name cannot be empty")

    for field, value in update_data.items():
        setattr(current_user, field, value.strip() if isinstance(value, str) else value)

    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.post("/profile/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    if not (file.content_type or "").startswith("image/"):
        raise ValidationFailed("Avatar must be an image file")
    data = await file.read()
    if len(data) > settings.MAX_ARTWORK_UPLOAD_MB * 1024 * 1024:
        raise ValidationFailed(f"Avatar is too large (max {settings.MAX_ARTWORK_UPLOAD_MB}MB)")

    key = build_object_key(current_user.id, file.filename)
    current_user.avatar_url = await storage.upload(AVATAR_BUCKET, key, data, file.content_type)
    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.post("/profile/onboarding", response_model=ProfileResponse)
async def complete_onboarding(
    onboarding: OnboardingData,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    for field, value in onboarding.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    current_user.onboarding_completed = True
    current_user.onboarding_completed_at = utcnow()

    await db.commit()
    await db.refresh(current_user)
    logger.info(f"Onboarding completed for user {current_user.id}")
    return current_user


@router.patch("/users/{user_id}/password", status_code=status.HTTP_204_NO_CONTENT)
async def update_user_password(
    user_id: uuid.UUID,
    password_data: UserPasswordUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Check for authorization: User can only change their own password
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to update this user's password"
        )

    # Verify old password
    if not verify_password(password_data.old_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect old password"
        )

    # Hash and set new password
    current_user.password_hash = get_password_hash(password_data.new_password)
    await db.commit()


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db), current_user: User = Depends(get_current_user)):
    # Check for authorization
    if current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this user")

    # Owned rows go with the user through ON DELETE CASCADE
    await db.delete(current_user)
    await db.commit()
    logger.info(f"Deleted user {user_id}")
    return  # Explicitly return None for clarity with 204 No Content
