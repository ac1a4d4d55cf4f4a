import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from sqlalchemy.orm import sessionmaker

from onesync.core.config import settings
from onesync.core.exceptions import ValidationFailed
from onesync.schemas.mastering import MasteringSettings
from onesync.services.job_service import JobService
from onesync.services.storage import AUDIO_BUCKET, ObjectStorage, build_object_key

logger = logging.getLogger(__name__)

# --- Mastering constants ---
MAX_AUDIO_BYTES = 100 * 1024 * 1024
SUPPORTED_FORMATS = ("audio/wav", "audio/mp3", "audio/flac", "audio/aac")

BASE_COST_PER_MINUTE = 0.10
INTENSITY_MULTIPLIER = {"light": 1.0, "medium": 1.2, "heavy": 1.5}
BASS_MULTIPLIER = 1.1
HIGHS_MULTIPLIER = 1.1
WIDTH_MULTIPLIER = 1.05

# Polling: 1s, then 2s after 10 attempts, then 3s after 30; give up after 150
MAX_POLL_ATTEMPTS = 150

JOB_TYPE = "ai_mastering"


class MasteringError(Exception):
    pass


def default_settings() -> MasteringSettings:
    return MasteringSettings()


def validate_audio_file(content_type: Optional[str], size: int) -> None:
    content_type = content_type or ""
    if not content_type.startswith("audio/"):
        raise ValidationFailed("File must be an audio file")
    if size > MAX_AUDIO_BYTES:
        raise ValidationFailed("File size must be less than 100MB")
    if content_type not in SUPPORTED_FORMATS:
        raise ValidationFailed("Supported formats: WAV, MP3, FLAC, AAC")


def estimate_cost(duration_minutes: float, mastering_settings: MasteringSettings) -> float:
    cost = duration_minutes * BASE_COST_PER_MINUTE
    cost *= INTENSITY_MULTIPLIER[mastering_settings.intensity]
    if mastering_settings.enhance_bass:
        cost *= BASS_MULTIPLIER
    if mastering_settings.enhance_highs:
        cost *= HIGHS_MULTIPLIER
    if mastering_settings.stereo_width != 100:
        cost *= WIDTH_MULTIPLIER
    return round(cost, 2)


def poll_interval(attempts: int) -> float:
    if attempts > 30:
        return 3.0
    if attempts > 10:
        return 2.0
    return 1.0


class MasteringClient:
    """Client for the external AI mastering API: upload, master, poll, download."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.base_url = (settings.MASTERING_API_URL or "").rstrip("/")
        self.api_key = settings.MASTERING_API_KEY
        self.transport = transport
        self.sleep = sleep

    def configuration_status(self) -> Dict[str, Any]:
        if not self.base_url or not self.api_key:
            return {
                "is_configured": False,
                "message": "API configuration is missing. Please check your API credentials.",
            }
        return {"is_configured": True, "message": "AI Mastering API is properly configured."}

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}", "Cache-Control": "no-cache"}

    async def _call(self, method: str, url: str, step: str, timeout: float, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=timeout) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            raise MasteringError(f"{step} timeout - please try again")
        except httpx.RequestError as e:
            logger.error(f"Network error during {step.lower()}: {e}")
            raise MasteringError("Network error: Unable to connect to the mastering service.")

        if not response.is_success:
            logger.error(f"{step} failed ({response.status_code}): {response.text}")
            raise MasteringError(f"{step} failed ({response.status_code}): {response.text}")
        return response

    async def upload_audio(self, filename: str, data: bytes, content_type: str) -> str:
        response = await self._call(
            "POST", f"{self.base_url}/api/upload", "Upload", 60.0,
            headers={"Authorization": f"Bearer {self.api_key}"},
            files={"audio": (filename, data, content_type)},
            data={"api_key": self.api_key},
        )
        result = response.json()
        upload_id = result.get("upload_id") or result.get("id")
        if not upload_id:
            raise MasteringError("Upload response missing upload ID")
        return str(upload_id)

    async def start_processing(self, upload_id: str, mastering_settings: MasteringSettings) -> str:
        params = {
            "upload_id": upload_id,
            "api_key": self.api_key,
            "style": mastering_settings.style,
            "intensity": mastering_settings.intensity,
            "target_loudness": mastering_settings.target_loudness,
            "enhance_bass": mastering_settings.enhance_bass,
            "enhance_highs": mastering_settings.enhance_highs,
            "stereo_width": mastering_settings.stereo_width / 100,
            "priority": "high",
        }
        response = await self._call(
            "POST", f"{self.base_url}/api/master", "Processing", 30.0, headers=self.headers, json=params
        )
        result = response.json()
        job_id = result.get("job_id") or result.get("id")
        if not job_id:
            raise MasteringError("Processing response missing job ID")
        return str(job_id)

    async def check_status(self, job_id: str) -> Dict[str, Any]:
        response = await self._call(
            "GET", f"{self.base_url}/api/status/{job_id}", "Status check", 10.0,
            headers=self.headers, params={"api_key": self.api_key},
        )
        return response.json()

    async def poll_for_completion(self, job_id: str) -> str:
        attempts = 0
        while True:
            attempts += 1
            status = await self.check_status(job_id)

            if status.get("status") == "completed" and status.get("result_url"):
                return status["result_url"]
            if status.get("status") == "failed":
                raise MasteringError(status.get("error") or "Processing failed")
            if attempts >= MAX_POLL_ATTEMPTS:
                raise MasteringError("Processing timeout")

            await self.sleep(poll_interval(attempts))

    async def download(self, url: str) -> bytes:
        response = await self._call("GET", url, "Download", 60.0)
        return response.content


async def run_mastering_job(
    job_id: uuid.UUID,
    session_factory: sessionmaker,
    storage: ObjectStorage,
    client: MasteringClient,
    user_id: uuid.UUID,
    filename: str,
    content_type: str,
    data: bytes,
    original_audio_url: str,
    mastering_settings: MasteringSettings,
):
    """Runs the mastering pipeline and records the outcome on the job."""
    logger.info(f"[Job ID: {job_id}] Starting AI mastering of '{filename}'.")
    start_time = time.time()

    async with session_factory() as session:
        job_service = JobService(session)
        await job_service.start(job_id)

        try:
            upload_id = await client.upload_audio(filename, data, content_type)
            remote_job_id = await client.start_processing(upload_id, mastering_settings)
            result_url = await client.poll_for_completion(remote_job_id)
            mastered = await client.download(result_url)

            key = build_object_key(user_id, f"mastered_{filename}")
            processed_audio_url = await storage.upload(AUDIO_BUCKET, key, mastered, content_type)

            duration = time.time() - start_time
            logger.info(f"[Job ID: {job_id}] Mastering completed in {duration:.2f}s.")
            result = {
                "processed_audio_url": processed_audio_url,
                "original_audio_url": original_audio_url,
                "processing_time": round(duration),
                "settings": mastering_settings.model_dump(),
                "metadata": {
                    "original_size": len(data),
                    "original_name": filename,
                    "processed_size": len(mastered),
                },
            }
            await job_service.complete(job_id, result, duration)

        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"[Job ID: {job_id}] Mastering failed after {duration:.2f}s. Error: {e}", exc_info=True)
            await job_service.fail(job_id, str(e), duration)


# Dependency
async def get_mastering_client() -> MasteringClient:
    return MasteringClient()
