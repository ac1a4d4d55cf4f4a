import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from onesync.models.background_job import BackgroundJob, JobStatus
from onesync.schemas.background_job import JobCreate, JobUpdate
from onesync.services.database import utcnow

logger = logging.getLogger(__name__)


class JobService:
    """Rows tracking work done after the request returns (AI mastering, for now)."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_job(self, job_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[BackgroundJob]:
        """Look a job up by id. With `user_id`, someone else's job reads as missing."""
        stmt = select(BackgroundJob).where(BackgroundJob.id == job_id)
        if user_id is not None:
            stmt = stmt.where(BackgroundJob.user_id == user_id)
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def create_job(self, job_create: JobCreate) -> BackgroundJob:
        job = BackgroundJob(
            job_type=job_create.job_type,
            parameters=job_create.parameters,
            user_id=job_create.user_id,
            status=JobStatus.PENDING.value,
        )
        self.db.add(job)
        await self.db.commit()
        await self.db.refresh(job)
        logger.info(f"Created {job.job_type} job {job.id} for user {job.user_id}")
        return job

    async def update_job(self, job_id: uuid.UUID, job_update: JobUpdate) -> Optional[BackgroundJob]:
        job = await self.get_job(job_id)
        if job is None:
            logger.warning(f"Job {job_id} vanished before it could be updated")
            return None

        changes = job_update.model_dump(exclude_unset=True)
        if changes.get("status") is not None:
            changes["status"] = JobStatus(changes["status"]).value
        for field, value in changes.items():
            setattr(job, field, value)

        await self.db.commit()
        await self.db.refresh(job)
        return job

    async def start(self, job_id: uuid.UUID) -> Optional[BackgroundJob]:
        return await self.update_job(job_id, JobUpdate(status=JobStatus.RUNNING, started_at=utcnow()))

    async def complete(self, job_id: uuid.UUID, result: Dict[str, Any], duration_s: float) -> Optional[BackgroundJob]:
        return await self.update_job(job_id, JobUpdate(
            status=JobStatus.COMPLETED, result=result, completed_at=utcnow(), duration_s=duration_s,
        ))

    async def fail(self, job_id: uuid.UUID, error: str, duration_s: float) -> Optional[BackgroundJob]:
        return await self.update_job(job_id, JobUpdate(
            status=JobStatus.FAILED,
            result={"error": error or "Unknown error occurred"},
            completed_at=utcnow(),
            duration_s=duration_s,
        ))
