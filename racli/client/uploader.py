"""
Checksum-verified media upload: init, PUT bytes, finalize.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from racli.client.http import join_url
from racli.common.exceptions import ChecksumMismatchError, FileSystemError
from racli.common.models import (
    FinalizeRequest,
    FinalizeResponse,
    MediaReference,
    UploadInitRequest,
    UploadInitResponse,
)

if TYPE_CHECKING:
    from racli.client.http import ResilientHttpClient

logger = logging.getLogger(__name__)

UPLOAD_INIT_PATH = "/v1/media/uploadInit"


class ChecksumUploader:
    """Uploads a file and proves the server stored exactly those bytes."""

    def __init__(
        self, cdv_base: str, http: ResilientHttpClient, timeout_ms: int | None = None
    ):
        self.cdv_base = cdv_base
        self.http = http
        self.timeout_ms = timeout_ms

    @staticmethod
    def sha256_hex(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    def upload_init(self, mime_type: str, size: int) -> UploadInitResponse:
        return self.http.request(
            join_url(self.cdv_base, UPLOAD_INIT_PATH),
            "POST",
            UploadInitRequest(mime_type=mime_type, size=size).to_wire(),
            model=UploadInitResponse,
            timeout_ms=self.timeout_ms,
        )

    def upload(self, file_path: Path | str, mime_type: str) -> MediaReference:
        """
        Upload file_path and return its content reference.

        The server's content id must equal the local SHA-256 digest
        (case-insensitive); a mismatch raises ChecksumMismatchError and is
        never retried.
        """
        path = Path(file_path)
        try:
            data = path.read_bytes()
        except OSError as e:
            msg = f"Failed to read media file {path}: {e.strerror or e}"
            raise FileSystemError(msg) from e
        digest = self.sha256_hex(data)
        logger.info("Uploading %s (%d bytes, sha256=%s)", path, len(data), digest)

        init = self.upload_init(mime_type, len(data))
        self.http.put_bytes(
            init.upload_url, data, mime_type, timeout_ms=self.timeout_ms
        )
        finalized, correlation_id = self.http.exchange(
            init.finalize_url,
            "POST",
            FinalizeRequest(checksum=digest).to_wire(),
            model=FinalizeResponse,
            timeout_ms=self.timeout_ms,
        )

        if finalized.cid.lower() != digest:
            logger.error("Checksum mismatch for %s", path)
            raise ChecksumMismatchError(digest, finalized.cid, correlation_id)

        return MediaReference(content_id=digest, mime_type=mime_type)
