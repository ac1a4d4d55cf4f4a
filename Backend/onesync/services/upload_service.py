import json
import logging
from typing import List, Optional, Tuple

from fastapi import UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.core.config import settings
from onesync.core.exceptions import OneSyncException, ValidationFailed, database_error_message
from onesync.models.release import Release
from onesync.models.track import Track
from onesync.models.user import User
from onesync.schemas.release import ReleaseUploadMetadata
from onesync.services import catalog_service
from onesync.services.intercom import IntercomService
from onesync.services.storage import (
    ARTWORK_BUCKET, AUDIO_BUCKET, ObjectStorage, StorageError, build_object_key,
)

logger = logging.getLogger(__name__)

MB = 1024 * 1024


def parse_metadata(raw: str) -> ReleaseUploadMetadata:
    try:
        return ReleaseUploadMetadata.model_validate(json.loads(raw))
    except json.JSONDecodeError:
        raise ValidationFailed("metadata must be valid JSON")
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationFailed(f"Invalid release metadata ({field}): {first['msg']}")


def _check_file(upload: UploadFile, data: bytes, kind: str, prefix: str, max_mb: int) -> None:
    content_type = upload.content_type or ""
    if not content_type.startswith(prefix):
        raise ValidationFailed(f"{upload.filename or kind} must be an {kind} file")
    if len(data) > max_mb * MB:
        raise ValidationFailed(f"{upload.filename or kind} is too large (max {max_mb}MB)")


async def _insert_release(
    db: AsyncSession,
    user: User,
    metadata: ReleaseUploadMetadata,
    platforms: List[str],
    audio_urls: List[str],
    artwork_url: Optional[str],
    artwork_name: Optional[str],
) -> Release:
    release = Release(
        user_id=user.id,
        artist_id=metadata.artist_id,
        title=metadata.title.strip(),
        release_type=metadata.release_type,
        primary_artist=metadata.primary_artist.strip(),
        display_artist=metadata.display_artist,
        featured_artist=metadata.featured_artist,
        label=metadata.label,
        cat_number=metadata.cat_number or await catalog_service.next_release_cat_number(db),
        main_genre=metadata.main_genre,
        sub_genre=metadata.sub_genre,
        upc=metadata.upc,
        release_date=metadata.release_date,
        original_release_date=metadata.original_release_date,
        countries=metadata.countries,
        is_worldwide=metadata.is_worldwide,
        platforms=platforms,
        retailers=metadata.retailers,
        description=metadata.description,
        copyrights=metadata.copyrights,
        release_notes=metadata.release_notes,
        artwork_url=artwork_url,
        artwork_name=artwork_name,
        exclusive_for=metadata.exclusive_for,
        allow_preorder_itunes=metadata.allow_preorder_itunes,
        track_count=len(metadata.tracks),
        status="pending",
    )
    db.add(release)
    await db.flush()

    cat_numbers = await catalog_service.next_track_cat_numbers(db, len(metadata.tracks))
    for number, (item, audio_url, cat_number) in enumerate(zip(metadata.tracks, audio_urls, cat_numbers), start=1):
        db.add(Track(
            user_id=user.id,
            release_id=release.id,
            artist_id=metadata.artist_id,
            title=item.title.strip(),
            artist=item.track_display_artist or metadata.primary_artist,
            genre=metadata.main_genre,
            release_date=metadata.release_date,
            track_number=number,
            duration=item.duration,
            isrc=item.isrc,
            cat_number=cat_number,
            description=item.description,
            is_explicit=item.is_explicit,
            album_only=item.album_only,
            mix_version=item.mix_version,
            remixer=item.remixer,
            publisher=item.publisher,
            composer=item.composer,
            lyricist=item.lyricist,
            contributors=item.contributors,
            track_display_artist=item.track_display_artist,
            track_featured_artist=item.track_featured_artist,
            price_tiers=item.price_tiers,
            audio_file_url=audio_url,
            audio_file_urls=[audio_url],
            artwork_url=artwork_url,
            platforms=platforms,
            status="pending",
        ))
    await db.commit()
    return release


async def _discard(storage: ObjectStorage, stored: List[Tuple[str, str]]) -> None:
    for bucket, key in stored:
        await storage.delete(bucket, key)


async def upload_release(
    db: AsyncSession,
    storage: ObjectStorage,
    intercom: IntercomService,
    user: User,
    metadata_json: str,
    audio_files: List[UploadFile],
    artwork: Optional[UploadFile] = None,
) -> Tuple[Release, Optional[str]]:
    """
    Store the files, insert the release with its tracks, then open a review ticket.

    Runs strictly in that order. Nothing is inserted when a file cannot be
    stored, nothing stays stored when the insert fails, and a failed ticket
    does not fail the upload.
    """
    # 1. Validate everything before touching storage
    metadata = parse_metadata(metadata_json)
    if len(audio_files) != len(metadata.tracks):
        raise ValidationFailed(
            f"Each track needs an audio file ({len(metadata.tracks)} tracks, {len(audio_files)} files)"
        )
    platforms = catalog_service.validate_platforms(metadata.platforms)
    if metadata.artist_id:
        await catalog_service.get_owned_artist(db, metadata.artist_id, user.id)

    audio_payloads = []
    for upload in audio_files:
        data = await upload.read()
        _check_file(upload, data, "audio", "audio/", settings.MAX_AUDIO_UPLOAD_MB)
        audio_payloads.append((upload, data))

    artwork_payload = None
    if artwork is not None and artwork.filename:
        data = await artwork.read()
        _check_file(artwork, data, "image", "image/", settings.MAX_ARTWORK_UPLOAD_MB)
        artwork_payload = (artwork, data)

    # 2. Upload the files
    stored = []
    audio_urls = []
    artwork_url = None
    try:
        for upload, data in audio_payloads:
            key = build_object_key(user.id, upload.filename)
            audio_urls.append(await storage.upload(AUDIO_BUCKET, key, data, upload.content_type))
            stored.append((AUDIO_BUCKET, key))

        if artwork_payload:
            upload, data = artwork_payload
            key = build_object_key(user.id, upload.filename)
            artwork_url = await storage.upload(ARTWORK_BUCKET, key, data, upload.content_type)
            stored.append((ARTWORK_BUCKET, key))
    except StorageError as e:
        logger.error(f"Upload aborted for user {user.id}: {e}")
        await _discard(storage, stored)
        raise OneSyncException(status_code=500, detail=f"Failed to store uploaded files: {e}")

    # 3. Insert the release, then its tracks numbered 1..n, in one transaction
    artwork_name = artwork_payload[0].filename if artwork_payload else None
    try:
        release = await _insert_release(db, user, metadata, platforms, audio_urls, artwork_url, artwork_name)
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Release upload for user {user.id} rejected by the database: {e.orig}")
        await _discard(storage, stored)
        raise ValidationFailed(database_error_message(e, "release"))
    logger.info(f"Release {release.id} '{release.title}' uploaded with {len(audio_urls)} track(s)")

    # 4. Fire the release-uploaded event
    ticket_data = metadata.model_dump(mode="json")
    ticket_data.update(audio_file_count=len(audio_urls), artwork_url=artwork_url)
    ticket_id = None
    try:
        ticket = await intercom.create_release_ticket(ticket_data, user)
        ticket_id = ticket.get("ticketId")
    except OneSyncException as e:
        logger.warning(f"Release {release.id} uploaded but the support ticket failed: {e.detail}")

    return await catalog_service.get_release(db, user.id, release.id), ticket_id
