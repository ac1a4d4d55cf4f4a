"""
Object storage for uploaded audio, artwork and avatars.

Objects are addressed by bucket and key. The local provider keeps them on disk
under STORAGE_ROOT and the app serves that directory at STORAGE_PUBLIC_URL.
"""

import asyncio
import logging
import os
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from onesync.core.config import settings

logger = logging.getLogger(__name__)

AUDIO_BUCKET = "audio-files"
ARTWORK_BUCKET = "artwork"
AVATAR_BUCKET = "avatars"
BUCKETS = (AUDIO_BUCKET, ARTWORK_BUCKET, AVATAR_BUCKET)


class StorageError(Exception):
    pass


def sanitize_filename(filename: Optional[str]) -> str:
    name = os.path.basename(filename or "") or "file"
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._")
    return name or "file"


def build_object_key(user_id, filename: Optional[str]) -> str:
    """`<user_id>/<timestamp>_<sanitized filename>`"""
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"{user_id}/{stamp}_{sanitize_filename(filename)}"


class ObjectStorage(ABC):
    """Interface every storage backend implements."""

    @abstractmethod
    async def upload(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store `data` under bucket/key, replacing any existing object. Returns the public URL."""

    @abstractmethod
    async def delete(self, bucket: str, key: str) -> bool:
        pass

    @abstractmethod
    async def exists(self, bucket: str, key: str) -> bool:
        pass

    @abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        pass


class LocalObjectStorage(ObjectStorage):
    """Storage backend on the local filesystem, one subdirectory per bucket."""

    def __init__(self, root: Optional[str] = None, public_url: Optional[str] = None):
        self.root = Path(root or settings.STORAGE_ROOT).expanduser().absolute()
        self.base_url = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")

    def _get_path(self, bucket: str, key: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        if not key or key.startswith(("/", "\\")) or ".." in Path(key).parts:
            raise StorageError(f"Invalid object key: {key!r}")

        bucket_root = (self.root / bucket).resolve()
        path = (bucket_root / key).resolve()
        if bucket_root not in path.parents:
            raise StorageError(f"Invalid object key: {key!r}")
        return path

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write next to the target then swap it in, so readers never see half a file
        tmp_path = path.with_name(path.name + ".part")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)

    async def upload(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._get_path(bucket, key)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error(f"Failed to store {bucket}/{key}: {e}")
            raise StorageError(f"Failed to store {bucket}/{key}") from e
        logger.info(f"Stored {bucket}/{key} ({len(data)} bytes, {content_type or 'unknown type'})")
        return self.public_url(bucket, key)

    async def delete(self, bucket: str, key: str) -> bool:
        path = self._get_path(bucket, key)
        if not path.exists():
            return False
        await asyncio.to_thread(path.unlink)
        return True

    async def exists(self, bucket: str, key: str) -> bool:
        return self._get_path(bucket, key).is_file()

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{key}"


# Dependency
def get_storage() -> ObjectStorage:
    """Dependency injection for the object storage backend"""
    return LocalObjectStorage()
