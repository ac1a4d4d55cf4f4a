"""Release upload, catalog browsing, metadata edits and the distributor CSV."""
import csv
import io
import json
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import register_user
from onesync.services.ftp_upload import FtpUploader, get_ftp_uploader
from onesync.services.intercom import IntercomService, get_intercom_service
from onesync.services.storage import LocalObjectStorage, StorageError, get_storage

METADATA = {
    "title": "Midnight Circuit",
    "release_type": "EP",
    "primary_artist": "Nova Lights",
    "main_genre": "Electronic",
    "release_date": "2025-03-01",
    "platforms": ["spotify", "apple"],
    "retailers": ["Spotify", "Apple Music"],
    "tracks": [
        {"title": "Intro", "isrc": "USX9P2500001", "is_explicit": True},
        {"title": "Outro, Reprise"},
    ],
}


class IntercomStub:
    def __init__(self, status=201):
        self.status = status
        self.payloads = []

    def __call__(self, request):
        self.payloads.append(json.loads(request.content))
        return httpx.Response(self.status, json={"id": "ticket-1"})


class FlakyStorage(LocalObjectStorage):
    """Local storage whose nth upload fails."""

    def __init__(self, root, fail_on):
        super().__init__(root=root, public_url="/storage")
        self.fail_on = fail_on
        self.calls = 0

    async def upload(self, bucket, key, data, content_type=None):
        self.calls += 1
        if self.calls == self.fail_on:
            raise StorageError(f"Failed to store {bucket}/{key}")
        return await super().upload(bucket, key, data, content_type)


@pytest.fixture
def intercom(override_dependency):
    stub = IntercomStub()
    override_dependency(get_intercom_service, lambda: IntercomService(transport=httpx.MockTransport(stub)))
    return stub


def _upload(client, headers, metadata=None, audio_count=None, artwork=True, audio_type="audio/wav"):
    metadata = metadata or METADATA
    count = len(metadata["tracks"]) if audio_count is None else audio_count
    files = [("audio_files", (f"track{i + 1}.wav", b"RIFF" + bytes([i]), audio_type)) for i in range(count)]
    if artwork:
        files.append(("artwork", ("cover.jpg", b"\xff\xd8\xff", "image/jpeg")))
    return client.post(
        "/api/uploads/release", headers=headers, data={"metadata": json.dumps(metadata)}, files=files,
    )


@pytest.fixture
def release(client, auth_headers, intercom):
    response = _upload(client, auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["release"]


class TestUpload:
    def test_upload_creates_release_and_tracks(self, client, auth_headers, intercom, storage):
        response = _upload(client, auth_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["support_ticket_id"] == "ticket-1"

        release = body["release"]
        assert release["status"] == "pending"
        assert release["track_count"] == 2
        assert release["cat_number"] == "REL000001"
        assert release["artwork_name"] == "cover.jpg"
        assert release["artwork_url"].startswith("/storage/artwork/")
        assert [t["track_number"] for t in release["tracks"]] == [1, 2]
        assert [t["cat_number"] for t in release["tracks"]] == ["CAT000001", "CAT000002"]
        assert release["tracks"][0]["is_explicit"] is True
        assert release["tracks"][0]["audio_file_url"].startswith("/storage/audio-files/")

        stored = list((storage.root / "audio-files").rglob("*.wav"))
        assert len(stored) == 2

    def test_ticket_sent_for_release(self, client, auth_headers, intercom):
        _upload(client, auth_headers)
        assert intercom.payloads[0]["subject"] == "New Release Upload: Midnight Circuit"

    def test_ticket_failure_does_not_fail_upload(self, client, auth_headers, intercom):
        intercom.status = 500
        response = _upload(client, auth_headers)
        assert response.status_code == 201
        assert response.json()["support_ticket_id"] is None

    def test_audio_count_must_match_tracks(self, client, auth_headers, intercom, storage):
        response = _upload(client, auth_headers, audio_count=1)
        assert response.status_code == 400
        assert "Each track needs an audio file" in response.json()["detail"]
        assert not (storage.root / "audio-files").exists()

    def test_rejects_non_audio(self, client, auth_headers, intercom):
        assert _upload(client, auth_headers, audio_type="video/mp4").status_code == 400

    def test_rejects_unknown_platform(self, client, auth_headers, intercom):
        metadata = dict(METADATA, platforms=["spotify", "napster"])
        assert _upload(client, auth_headers, metadata=metadata).status_code == 400

    def test_requires_title(self, client, auth_headers, intercom):
        metadata = dict(METADATA, title="")
        assert _upload(client, auth_headers, metadata=metadata).status_code == 400

    def test_bad_metadata_json(self, client, auth_headers, intercom):
        response = client.post(
            "/api/uploads/release",
            headers=auth_headers,
            data={"metadata": "{not json"},
            files=[("audio_files", ("a.wav", b"RIFF", "audio/wav"))],
        )
        assert response.status_code == 400

    def test_storage_failure_leaves_nothing_behind(self, client, auth_headers, intercom, storage, override_dependency):
        flaky = FlakyStorage(str(storage.root), fail_on=2)
        override_dependency(get_storage, lambda: flaky)

        response = _upload(client, auth_headers)
        assert response.status_code == 500
        assert "Failed to store uploaded files" in response.json()["detail"]
        assert flaky.calls == 2
        assert list(storage.root.rglob("*.wav")) == []
        assert client.get("/api/releases", headers=auth_headers).json() == []
        assert client.get("/api/tracks", headers=auth_headers).json() == []
        assert intercom.payloads == []

    def test_duplicate_cat_number_is_rejected(self, client, auth_headers, intercom, storage):
        metadata = dict(METADATA, cat_number="ONE-1")
        first = _upload(client, auth_headers, metadata=metadata)
        assert first.status_code == 201
        assert first.json()["release"]["cat_number"] == "ONE-1"

        other = register_user(client)
        response = _upload(client, other["headers"], metadata=metadata)
        assert response.status_code == 400
        assert response.json()["detail"] == "A release with this name already exists."
        assert len(list((storage.root / "audio-files").rglob("*.wav"))) == 2
        assert len(list((storage.root / "artwork").rglob("*.jpg"))) == 1
        assert client.get("/api/releases", headers=other["headers"]).json() == []
        assert client.get("/api/tracks", headers=other["headers"]).json() == []

    def test_links_own_artist(self, client, auth_headers, intercom):
        artist_id = client.post("/api/artists", headers=auth_headers, json={"name": "Nova Lights"}).json()["id"]
        response = _upload(client, auth_headers, metadata=dict(METADATA, artist_id=artist_id))
        assert response.status_code == 201
        release = response.json()["release"]
        assert release["artist_id"] == artist_id
        assert {t["artist_id"] for t in release["tracks"]} == {artist_id}

    def test_rejects_someone_elses_artist(self, client, auth_headers, intercom, storage):
        artist_id = client.post("/api/artists", headers=auth_headers, json={"name": "Nova Lights"}).json()["id"]
        other = register_user(client)

        response = _upload(client, other["headers"], metadata=dict(METADATA, artist_id=artist_id))
        assert response.status_code == 404
        assert not (storage.root / "audio-files").exists()
        assert client.get("/api/releases", headers=other["headers"]).json() == []

    def test_rejects_deleted_artist(self, client, auth_headers, intercom, storage):
        artist_id = client.post("/api/artists", headers=auth_headers, json={"name": "Nova Lights"}).json()["id"]
        assert client.delete(f"/api/artists/{artist_id}", headers=auth_headers).status_code == 204

        response = _upload(client, auth_headers, metadata=dict(METADATA, artist_id=artist_id))
        assert response.status_code == 404
        assert not (storage.root / "audio-files").exists()


class TestCatalog:
    def test_list_and_filter(self, client, auth_headers, release):
        assert [r["id"] for r in client.get("/api/releases", headers=auth_headers).json()] == [release["id"]]
        assert client.get("/api/releases?status=pending", headers=auth_headers).json()[0]["id"] == release["id"]
        assert client.get("/api/releases?status=live", headers=auth_headers).json() == []
        assert client.get("/api/releases?status=bogus", headers=auth_headers).status_code == 400

    def test_other_users_cannot_see_release(self, client, release):
        other = register_user(client)
        assert client.get("/api/releases", headers=other["headers"]).json() == []
        assert client.get(f"/api/releases/{release['id']}", headers=other["headers"]).status_code == 404

    def test_tracks(self, client, auth_headers, release):
        tracks = client.get("/api/tracks", headers=auth_headers).json()
        assert {t["title"] for t in tracks} == {"Intro", "Outro, Reprise"}
        track_id = tracks[0]["id"]
        assert client.get(f"/api/tracks/{track_id}", headers=auth_headers).json()["id"] == track_id
        assert client.get("/api/tracks?status=live", headers=auth_headers).json() == []

    def test_platforms(self, client):
        platforms = client.get("/api/catalog/platforms").json()
        assert len(platforms) == 12
        assert platforms[0] == {"id": "spotify", "name": "Spotify"}


class TestMetadata:
    def test_partial_update(self, client, auth_headers, release):
        response = client.patch(f"/api/releases/{release['id']}/metadata", headers=auth_headers, json={
            "label": "Night Shift Records", "upc": "123456789012",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["label"] == "Night Shift Records"
        assert body["upc"] == "123456789012"
        assert body["title"] == "Midnight Circuit"

    def test_null_platforms_and_type_defaults(self, client, auth_headers, release):
        response = client.patch(f"/api/releases/{release['id']}/metadata", headers=auth_headers, json={
            "platforms": None, "release_type": None,
        })
        assert response.status_code == 200
        assert response.json()["platforms"] == []
        assert response.json()["release_type"] == "Single"

    def test_cannot_empty_required_field(self, client, auth_headers, release):
        response = client.patch(f"/api/releases/{release['id']}/metadata", headers=auth_headers, json={"title": ""})
        assert response.status_code == 400

    def test_delete_removes_tracks(self, client, auth_headers, release):
        assert client.delete(f"/api/releases/{release['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/releases/{release['id']}", headers=auth_headers).status_code == 404
        assert client.get("/api/tracks", headers=auth_headers).json() == []


class TestCsv:
    def test_download(self, client, auth_headers, release):
        response = client.get(f"/api/releases/{release['id']}/csv", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="REL000001.csv"' in response.headers["content-disposition"]

        header, first, second = list(csv.reader(io.StringIO(response.text)))
        assert header[0] == "ReleaseNo"
        assert first[0] == "900"
        assert second[13] == "Outro, Reprise"

    def test_ftp_upload(self, client, auth_headers, release, override_dependency):
        ftp = MagicMock()
        override_dependency(get_ftp_uploader, lambda: FtpUploader(ftp_factory=lambda: ftp))
        response = client.post(
            f"/api/releases/{release['id']}/csv/ftp", headers=auth_headers, json={"filename": "REL000001.csv"},
        )
        assert response.status_code == 200
        assert response.json()["filename"] == "REL000001.csv"
        assert ftp.storbinary.call_args.args[0] == "STOR REL000001.csv"

    def test_ftp_failure(self, client, auth_headers, release, override_dependency):
        ftp = MagicMock()
        ftp.connect.side_effect = OSError("no route to host")
        override_dependency(get_ftp_uploader, lambda: FtpUploader(ftp_factory=lambda: ftp))
        response = client.post(f"/api/releases/{release['id']}/csv/ftp", headers=auth_headers, json={})
        assert response.status_code == 502
        assert response.json()["detail"]["status"] == 503
