"""
Local object storage for uploaded audio.

Files are streamed to ``UPLOAD_DIR`` under a unique name.  The size limit is
enforced while the bytes arrive, so an oversized upload never lands on disk
in full.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from app.config import MAX_UPLOAD_BYTES, UPLOAD_DIR

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


class IncomingFile(Protocol):
    """What the transport hands over (satisfied by Starlette's UploadFile)."""

    filename: str | None

    @property
    def content_type(self) -> str | None: ...

    async def read(self, size: int = -1) -> bytes: ...


class UnsupportedMediaType(Exception):
    pass


class ArtifactTooLarge(Exception):
    pass


@dataclass(frozen=True)
class StagedArtifact:
    path: str
    filename: str
    size: int
    content_type: str


class ArtifactStorage:
    def __init__(
        self,
        upload_dir: str = UPLOAD_DIR,
        *,
        max_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_bytes = max_bytes

    async def stage(self, upload: IncomingFile) -> StagedArtifact:
        """Write *upload* to disk, rejecting non-audio and oversized files."""
        content_type = upload.content_type or ""
        if not content_type.startswith("audio/"):
            raise UnsupportedMediaType(f"Only audio files are allowed, got {content_type!r}")

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        original = os.path.basename(upload.filename or "audio")
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}-{original}"
        path = self.upload_dir / unique

        size = 0
        try:
            with path.open("wb") as handle:
                while chunk := await upload.read(_CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise ArtifactTooLarge(
                            f"Upload exceeds {self.max_bytes} bytes"
                        )
                    await asyncio.to_thread(handle.write, chunk)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
            raise

        logger.info("Staged %s (%d bytes, %s)", unique, size, content_type)
        return StagedArtifact(
            path=str(path),
            filename=unique,
            size=size,
            content_type=content_type,
        )

    async def delete(self, path: str) -> None:
        """Remove a staged file; a missing file is not an error."""
        try:
            await asyncio.to_thread(os.remove, path)
            logger.info("Deleted staged artifact %s", path)
        except FileNotFoundError:
            logger.debug("Artifact %s already gone", path)
