"""AI mastering: validation, cost model, polling and the background job."""
import json
import uuid

import httpx
import pytest

from conftest import run
from onesync.core.exceptions import ValidationFailed
from onesync.models.background_job import BackgroundJob, JobStatus
from onesync.schemas.mastering import MasteringSettings
from onesync.services.mastering_service import (
    MAX_POLL_ATTEMPTS,
    MasteringClient,
    MasteringError,
    estimate_cost,
    poll_interval,
    run_mastering_job,
    validate_audio_file,
)


class TestValidateAudioFile:
    def test_accepts_supported_audio(self):
        validate_audio_file("audio/wav", 1024)

    def test_rejects_non_audio(self):
        with pytest.raises(ValidationFailed, match="must be an audio file"):
            validate_audio_file("image/png", 10)

    def test_rejects_large_files(self):
        with pytest.raises(ValidationFailed, match="less than 100MB"):
            validate_audio_file("audio/wav", 100 * 1024 * 1024 + 1)

    def test_rejects_unsupported_audio(self):
        with pytest.raises(ValidationFailed, match="Supported formats"):
            validate_audio_file("audio/ogg", 10)


class TestEstimateCost:
    def test_defaults(self):
        # 10 min x 0.10 x 1.2 (medium)
        assert estimate_cost(10, MasteringSettings()) == 1.2

    def test_all_multipliers(self):
        settings = MasteringSettings(intensity="heavy", enhance_bass=True, enhance_highs=True, stereo_width=120)
        assert estimate_cost(10, settings) == round(10 * 0.10 * 1.5 * 1.1 * 1.1 * 1.05, 2)

    def test_light(self):
        assert estimate_cost(3, MasteringSettings(intensity="light")) == 0.3


class TestPollInterval:
    @pytest.mark.parametrize("attempts,expected", [(1, 1.0), (10, 1.0), (11, 2.0), (30, 2.0), (31, 3.0), (150, 3.0)])
    def test_backoff(self, attempts, expected):
        assert poll_interval(attempts) == expected


def _client(handler, sleeps=None):
    async def fake_sleep(seconds):
        if sleeps is not None:
            sleeps.append(seconds)

    return MasteringClient(transport=httpx.MockTransport(handler), sleep=fake_sleep)


class TestMasteringClient:
    def test_configuration_status(self, monkeypatch):
        from onesync.core.config import settings
        assert MasteringClient().configuration_status()["is_configured"] is True
        monkeypatch.setattr(settings, "MASTERING_API_KEY", None)
        status = MasteringClient().configuration_status()
        assert status["is_configured"] is False
        assert "configuration is missing" in status["message"]

    def test_upload_reads_upload_id_or_id(self):
        client = _client(lambda request: httpx.Response(200, json={"id": "up-1"}))
        assert run(client.upload_audio("song.wav", b"RIFF", "audio/wav")) == "up-1"

    def test_start_processing_scales_stereo_width(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"job_id": "job-9"})

        client = _client(handler)
        assert run(client.start_processing("up-1", MasteringSettings(stereo_width=150))) == "job-9"
        assert seen["stereo_width"] == 1.5
        assert seen["upload_id"] == "up-1"

    def test_poll_until_completed(self):
        statuses = iter([{"status": "processing"}] * 12 + [{"status": "completed", "result_url": "https://cdn/x.wav"}])
        sleeps = []
        client = _client(lambda request: httpx.Response(200, json=next(statuses)), sleeps)
        assert run(client.poll_for_completion("job-9")) == "https://cdn/x.wav"
        assert sleeps == [1.0] * 10 + [2.0] * 2

    def test_poll_failed(self):
        client = _client(lambda request: httpx.Response(200, json={"status": "failed", "error": "clipping"}))
        with pytest.raises(MasteringError, match="clipping"):
            run(client.poll_for_completion("job-9"))

    def test_poll_times_out(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"status": "processing"})

        with pytest.raises(MasteringError, match="Processing timeout"):
            run(_client(handler).poll_for_completion("job-9"))
        assert len(calls) == MAX_POLL_ATTEMPTS

    def test_http_error_becomes_mastering_error(self):
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(MasteringError, match=r"Upload failed \(500\)"):
            run(client.upload_audio("song.wav", b"x", "audio/wav"))


def _mastering_api(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/upload":
        return httpx.Response(200, json={"upload_id": "up-1"})
    if path == "/api/master":
        return httpx.Response(200, json={"job_id": "remote-1"})
    if path.startswith("/api/status/"):
        return httpx.Response(200, json={"status": "completed", "result_url": "https://cdn.example.com/out.wav"})
    if request.url.host == "cdn.example.com":
        return httpx.Response(200, content=b"MASTERED")
    return httpx.Response(404)


class TestRunMasteringJob:
    def _create_job(self, db_run):
        async def create(session):
            job = BackgroundJob(job_type="ai_mastering", status=JobStatus.PENDING.value, parameters={})
            session.add(job)
            await session.flush()
            return job.id
        return db_run(create)

    def _load_job(self, db_run, job_id):
        async def load(session):
            return await session.get(BackgroundJob, job_id)
        return db_run(load)

    def test_completed_job_records_result(self, db_run, session_factory, storage):
        job_id = self._create_job(db_run)
        run(run_mastering_job(
            job_id, session_factory, storage, _client(_mastering_api), uuid.uuid4(),
            "song.wav", "audio/wav", b"ORIGINAL", "/storage/audio-files/u/orig.wav", MasteringSettings(),
        ))

        job = self._load_job(db_run, job_id)
        assert job.status == JobStatus.COMPLETED.value
        assert job.result["original_audio_url"] == "/storage/audio-files/u/orig.wav"
        assert job.result["processed_audio_url"].startswith("/storage/audio-files/")
        assert job.result["metadata"] == {"original_size": 8, "original_name": "song.wav", "processed_size": 8}
        assert job.duration_s is not None

    def test_failed_job_records_error(self, db_run, session_factory, storage):
        job_id = self._create_job(db_run)
        client = _client(lambda request: httpx.Response(503, text="unavailable"))
        run(run_mastering_job(
            job_id, session_factory, storage, client, uuid.uuid4(),
            "song.wav", "audio/wav", b"ORIGINAL", "/storage/x.wav", MasteringSettings(),
        ))

        job = self._load_job(db_run, job_id)
        assert job.status == JobStatus.FAILED.value
        assert "Upload failed (503)" in job.result["error"]
