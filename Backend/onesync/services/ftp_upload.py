import asyncio
import ftplib
import io
import logging
import posixpath
from typing import Callable, Dict, Optional

from onesync.core.config import settings
from onesync.core.exceptions import IntegrationNotConfigured, UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "release.csv"


class FtpUploader:
    """Drops release sheets on the distributor's FTP server."""

    def __init__(self, ftp_factory: Callable[[], ftplib.FTP] = ftplib.FTP):
        self.host = settings.FTP_HOST
        self.port = settings.FTP_PORT
        self.user = settings.FTP_USER
        self.password = settings.FTP_PASSWORD
        self.timeout = settings.FTP_TIMEOUT_SECONDS
        self.ftp_factory = ftp_factory

    def _store(self, filename: str, payload: bytes) -> None:
        ftp = self.ftp_factory()
        try:
            ftp.connect(self.host, self.port, timeout=self.timeout)
            ftp.login(self.user, self.password)
            ftp.storbinary(f"STOR {filename}", io.BytesIO(payload))
        finally:
            ftp.close()

    async def upload_csv(self, csv_content: str, filename: Optional[str] = None) -> Dict[str, object]:
        if not csv_content:
            raise ValidationFailed("CSV content is required")
        if not self.host or not self.user:
            logger.error("FTP_HOST or FTP_USER is not set")
            raise IntegrationNotConfigured("FTP")

        filename = posixpath.basename(filename or DEFAULT_FILENAME) or DEFAULT_FILENAME
        logger.info(f"Uploading {filename} to ftp://{self.host}:{self.port}")
        try:
            await asyncio.to_thread(self._store, filename, csv_content.encode("utf-8"))
        except ftplib.all_errors as e:
            logger.error(f"FTP upload of {filename} failed: {e}")
            raise UpstreamError("FTP", 503, str(e))

        logger.info(f"FTP upload of {filename} completed")
        return {
            "success": True,
            "message": f"CSV file {filename} uploaded successfully to FTP server",
            "filename": filename,
        }


# Dependency
async def get_ftp_uploader() -> FtpUploader:
    return FtpUploader()
