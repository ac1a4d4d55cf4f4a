import json
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from onesync.services.database import get_db, get_session_factory
from onesync.services.job_service import JobService
from onesync.services.storage import AUDIO_BUCKET, ObjectStorage, build_object_key, get_storage
from onesync.services.mastering_service import (
    JOB_TYPE,
    MasteringClient,
    default_settings,
    estimate_cost,
    get_mastering_client,
    run_mastering_job,
    validate_audio_file,
)
from onesync.schemas.background_job import Job, JobCreate
from onesync.schemas.mastering import MasteringSettings, CostEstimateRequest, CostEstimate, MasteringConfigStatus
from onesync.models.user import User
from onesync.core.security import get_current_user
from onesync.core.exceptions import IntegrationNotConfigured, ValidationFailed

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mastering")


def _parse_settings(raw: Optional[str]) -> MasteringSettings:
    if not raw:
        return default_settings()
    try:
        return MasteringSettings.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValidationFailed(f"Invalid mastering settings: {e}")


@router.post("/jobs", response_model=Job, status_code=status.HTTP_202_ACCEPTED)
async def start_mastering_job(
    background_tasks: BackgroundTasks,
    audio: UploadFile = File(...),
    settings: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    client: MasteringClient = Depends(get_mastering_client),
    session_factory: sessionmaker = Depends(get_session_factory),
    current_user: User = Depends(get_current_user)
):
    """
    Accepts an audio file for AI mastering and processes it in the background.
    Returns a job ID to track the status.
    """
    if not client.configuration_status()["is_configured"]:
        raise IntegrationNotConfigured("Mastering")

    mastering_settings = _parse_settings(settings)
    data = await audio.read()
    validate_audio_file(audio.content_type, len(data))

    key = build_object_key(current_user.id, audio.filename)
    original_audio_url = await storage.upload(AUDIO_BUCKET, key, data, audio.content_type)

    job_service = JobService(db)
    job = await job_service.create_job(JobCreate(
        job_type=JOB_TYPE,
        user_id=current_user.id,
        parameters={
            "original_name": audio.filename,
            "original_audio_url": original_audio_url,
            "settings": mastering_settings.model_dump(),
        },
    ))

    background_tasks.add_task(
        run_mastering_job,
        job_id=job.id,
        session_factory=session_factory,
        storage=storage,
        client=client,
        user_id=current_user.id,
        filename=audio.filename or "audio",
        content_type=audio.content_type,
        data=data,
        original_audio_url=original_audio_url,
        mastering_settings=mastering_settings,
    )
    logger.info(f"Queued mastering job {job.id} for user {current_user.id}")
    return job


@router.get("/config", response_model=MasteringConfigStatus)
async def get_mastering_config(client: MasteringClient = Depends(get_mastering_client)):
    return client.configuration_status()


@router.get("/defaults", response_model=MasteringSettings)
async def get_default_settings():
    return default_settings()


@router.post("/estimate", response_model=CostEstimate)
async def estimate_mastering_cost(request: CostEstimateRequest):
    return CostEstimate(estimated_cost=estimate_cost(request.duration_minutes, request.settings))
