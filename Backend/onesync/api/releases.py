import logging
import uuid
from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.database import get_db
from onesync.services import catalog_service
from onesync.services.csv_export import generate_release_csv
from onesync.services.ftp_upload import FtpUploader, get_ftp_uploader
from onesync.schemas.release import ReleaseResponse, ReleaseMetadataUpdate, FtpUploadRequest, FtpUploadResponse
from onesync.models.user import User
from onesync.core.security import get_current_user


logger = logging.getLogger(__name__)


router = APIRouter()

@router.get("/releases", response_model=List[ReleaseResponse])
async def list_releases(
    status: str = "all",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> List[ReleaseResponse]:
    """List the caller's releases, optionally filtered by live, pending or draft"""
    return await catalog_service.list_releases(db, current_user.id, status)

@router.get("/releases/{release_id}", response_model=ReleaseResponse)
async def read_release(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> ReleaseResponse:
    return await catalog_service.get_release(db, current_user.id, release_id)

@router.patch("/releases/{release_id}/metadata", response_model=ReleaseResponse)
async def update_release(
    release_id: uuid.UUID,
    metadata: ReleaseMetadataUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> ReleaseResponse:
    """Edit release metadata. Tracks and files are left untouched."""
    return await catalog_service.update_release_metadata(db, current_user.id, release_id, metadata)

@router.delete("/releases/{release_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_release(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await catalog_service.delete_release(db, current_user.id, release_id)

@router.get("/releases/{release_id}/csv")
async def export_release_csv(
    release_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Response:
    """Distributor sheet for the release, one row per track"""
    release = await catalog_service.get_release(db, current_user.id, release_id)
    content = generate_release_csv(release, release.tracks)
    filename = f"{release.cat_number or release.id}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/releases/{release_id}/csv/ftp", response_model=FtpUploadResponse)
async def upload_release_csv(
    release_id: uuid.UUID,
    request: FtpUploadRequest = FtpUploadRequest(),
    db: AsyncSession = Depends(get_db),
    uploader: FtpUploader = Depends(get_ftp_uploader),
    current_user: User = Depends(get_current_user)
):
    release = await catalog_service.get_release(db, current_user.id, release_id)
    content = generate_release_csv(release, release.tracks)
    logger.info(f"Sending CSV for release {release_id} to FTP as {request.filename}")
    return await uploader.upload_csv(content, request.filename)
