import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from onesync.core.exceptions import NotFoundException, ValidationFailed
from onesync.models.artist import Artist
from onesync.models.release import Release
from onesync.models.track import Track
from onesync.schemas.release import ReleaseMetadataUpdate
from onesync.services.database import utcnow

logger = logging.getLogger(__name__)

RELEASE_CAT_PREFIX = "REL"
TRACK_CAT_PREFIX = "CAT"
CAT_NUMBER_DIGITS = 6

PLATFORMS = [
    {"id": "spotify", "name": "Spotify"},
    {"id": "apple", "name": "Apple Music"},
    {"id": "youtube", "name": "YouTube Music"},
    {"id": "amazon", "name": "Amazon Music"},
    {"id": "tidal", "name": "Tidal"},
    {"id": "deezer", "name": "Deezer"},
    {"id": "pandora", "name": "Pandora"},
    {"id": "soundcloud", "name": "SoundCloud"},
    {"id": "bandcamp", "name": "Bandcamp"},
    {"id": "beatport", "name": "Beatport"},
    {"id": "traxsource", "name": "Traxsource"},
    {"id": "juno", "name": "Juno Download"},
]
PLATFORM_IDS = {p["id"] for p in PLATFORMS}

RELEASE_STATUS_FILTERS = ("all", "live", "pending", "draft")


async def get_owned_artist(db: AsyncSession, artist_id: uuid.UUID, user_id: uuid.UUID) -> Artist:
    """An active artist of `user_id`. Someone else's or a deleted artist reads as missing."""
    result = await db.execute(
        select(Artist).where(Artist.id == artist_id, Artist.user_id == user_id, Artist.is_active.is_(True))
    )
    artist = result.scalar_one_or_none()
    if not artist:
        raise NotFoundException("Artist", str(artist_id))
    return artist


def validate_platforms(platforms: Optional[Sequence[str]]) -> List[str]:
    platforms = list(platforms or [])
    unknown = [p for p in platforms if p not in PLATFORM_IDS]
    if unknown:
        raise ValidationFailed(f"Unknown platform(s): {', '.join(unknown)}")
    return platforms


def format_cat_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:0{CAT_NUMBER_DIGITS}d}"


async def next_cat_sequence(db: AsyncSession, column, prefix: str) -> int:
    """One more than the highest numeric suffix already issued under `prefix`."""
    result = await db.execute(select(column).where(column.like(f"{prefix}%")))
    highest = 0
    for (cat_number,) in result.all():
        suffix = cat_number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest + 1


async def next_release_cat_number(db: AsyncSession) -> str:
    return format_cat_number(RELEASE_CAT_PREFIX, await next_cat_sequence(db, Release.cat_number, RELEASE_CAT_PREFIX))


async def next_track_cat_numbers(db: AsyncSession, count: int) -> List[str]:
    start = await next_cat_sequence(db, Track.cat_number, TRACK_CAT_PREFIX)
    return [format_cat_number(TRACK_CAT_PREFIX, start + offset) for offset in range(count)]


async def list_releases(db: AsyncSession, user_id: uuid.UUID, status: str = "all") -> List[Release]:
    """The user's releases with their tracks, newest first."""
    if status not in RELEASE_STATUS_FILTERS:
        raise ValidationFailed(f"Invalid status filter: {status}")

    stmt = (
        select(Release)
        .options(selectinload(Release.tracks))
        .where(Release.user_id == user_id)
        .order_by(Release.created_at.desc())
    )
    if status != "all":
        stmt = stmt.where(Release.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_release(db: AsyncSession, user_id: uuid.UUID, release_id: uuid.UUID) -> Release:
    result = await db.execute(
        select(Release)
        .options(selectinload(Release.tracks))
        .where(Release.id == release_id, Release.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    release = result.scalar_one_or_none()
    if not release:
        raise NotFoundException("Release", str(release_id))
    return release


async def update_release_metadata(
    db: AsyncSession,
    user_id: uuid.UUID,
    release_id: uuid.UUID,
    metadata: ReleaseMetadataUpdate,
) -> Release:
    release = await get_release(db, user_id, release_id)

    update_data = metadata.model_dump(exclude_unset=True)
    if "platforms" in update_data:
        update_data["platforms"] = validate_platforms(update_data["platforms"])
    if "release_type" in update_data and not update_data["release_type"]:
        update_data["release_type"] = "Single"
    for field in ("title", "primary_artist", "main_genre", "release_date"):
        if field in update_data and not update_data[field]:
            raise ValidationFailed(f"{field} cannot be empty")

    for field, value in update_data.items():
        setattr(release, field, value)
    if release.platforms is None:
        release.platforms = []
    release.updated_at = utcnow()

    await db.commit()
    logger.info(f"Release metadata updated for {release_id} ({', '.join(sorted(update_data)) or 'no fields'})")
    return await get_release(db, user_id, release_id)


async def delete_release(db: AsyncSession, user_id: uuid.UUID, release_id: uuid.UUID) -> None:
    release = await get_release(db, user_id, release_id)
    await db.delete(release)
    await db.commit()
    logger.info(f"Deleted release {release_id} and its {len(release.tracks)} track(s)")


async def list_tracks(db: AsyncSession, user_id: uuid.UUID, status: Optional[str] = None) -> List[Track]:
    stmt = select(Track).where(Track.user_id == user_id).order_by(Track.created_at.desc())
    if status and status != "all":
        stmt = stmt.where(Track.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_track(db: AsyncSession, user_id: uuid.UUID, track_id: uuid.UUID) -> Track:
    result = await db.execute(select(Track).where(Track.id == track_id, Track.user_id == user_id))
    track = result.scalar_one_or_none()
    if not track:
        raise NotFoundException("Track", str(track_id))
    return track
