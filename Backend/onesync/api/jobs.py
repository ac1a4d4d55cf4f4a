import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from onesync.services.job_service import JobService
from onesync.schemas.background_job import Job
from onesync.services.database import get_db
from onesync.models.user import User
from onesync.core.security import get_current_user


router = APIRouter()

@router.get("/{job_id}", response_model=Job)
async def get_job_status(
    job_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Retrieve the status and result of a background job.
    """
    job_service = JobService(db)
    job = await job_service.get_job(job_id, user_id=current_user.id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job
