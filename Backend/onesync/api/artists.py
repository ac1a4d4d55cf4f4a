import logging
import uuid
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select

from onesync.services.database import get_db
from onesync.services import catalog_service
from onesync.models.artist import Artist
from onesync.models.user import User
from onesync.schemas.artist import ArtistCreate, ArtistUpdate, ArtistResponse
from onesync.core.security import get_current_user
from onesync.core.exceptions import ValidationFailed, database_error_message

logger = logging.getLogger(__name__)
router = APIRouter()

NAME_REQUIRED = "Artist name is mandatory and cannot be empty"


async def _commit(db: AsyncSession):
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Artist write rejected by the database: {e.orig}")
        raise ValidationFailed(database_error_message(e, "artist"))


@router.get("/artists", response_model=List[ArtistResponse])
async def list_artists(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active artists owned by the caller, by name."""
    result = await db.execute(
        select(Artist)
        .where(Artist.user_id == current_user.id, Artist.is_active.is_(True))
        .order_by(Artist.name)
    )
    return result.scalars().all()


@router.post("/artists", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
async def create_artist(
    artist: ArtistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not artist.name:
        raise ValidationFailed(NAME_REQUIRED)

    db_artist = Artist(user_id=current_user.id, **artist.model_dump())
    db.add(db_artist)
    await _commit(db)
    await db.refresh(db_artist)
    logger.info(f"Created artist {db_artist.id} for user {current_user.id}")
    return db_artist


@router.get("/artists/{artist_id}", response_model=ArtistResponse)
async def read_artist(
    artist_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await catalog_service.get_owned_artist(db, artist_id, current_user.id)


@router.patch("/artists/{artist_id}", response_model=ArtistResponse)
async def update_artist(
    artist_id: uuid.UUID,
    artist_update: ArtistUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    db_artist = await catalog_service.get_owned_artist(db, artist_id, current_user.id)

    update_data = artist_update.model_dump(exclude_unset=True)
    if "name" in update_data and not update_data["name"]:
        raise ValidationFailed(NAME_REQUIRED)

    for field, value in update_data.items():
        setattr(db_artist, field, value)

    await _commit(db)
    await db.refresh(db_artist)
    return db_artist


@router.delete("/artists/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artist(
    artist_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Soft delete; the row keeps its name reserved for this user
    db_artist = await catalog_service.get_owned_artist(db, artist_id, current_user.id)
    db_artist.is_active = False
    await db.commit()
    logger.info(f"Deactivated artist {artist_id}")
