"""
Upload validation.

The transport has already enforced the byte limit when staging; this only
looks at what the decoded media says.  It never deletes anything itself;
``cleanup_required`` tells the gateway to do it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from app.config import MAX_AUDIO_SECONDS, MEDIA_DECODE_TIMEOUT
from app.outcomes import RejectReason
from app.services.media import DecodeError, decode_duration


@dataclass(frozen=True)
class Valid:
    duration: float


@dataclass(frozen=True)
class Invalid:
    reason: RejectReason
    cleanup_required: bool = True
    message: str | None = field(default=None, compare=False)


class UploadValidator:
    def __init__(
        self,
        *,
        max_duration: float = MAX_AUDIO_SECONDS,
        decode_timeout: float = MEDIA_DECODE_TIMEOUT,
        decoder: Callable[[str], float] = decode_duration,
    ) -> None:
        self.max_duration = max_duration
        self._decode_timeout = decode_timeout
        self._decoder = decoder

    async def validate(self, path: str) -> Valid | Invalid:
        """
        Decode *path* and check its duration.

        Raises ``TimeoutError`` if decoding takes longer than the configured
        timeout; anything other than ``DecodeError`` propagates as well.
        """
        try:
            duration = await asyncio.wait_for(
                asyncio.to_thread(self._decoder, path),
                timeout=self._decode_timeout,
            )
        except DecodeError:
            return Invalid(RejectReason.DECODE_ERROR)

        if duration > self.max_duration:
            return Invalid(
                RejectReason.TOO_LONG,
                message=f"audio longer than {_describe_seconds(self.max_duration)} not allowed",
            )
        return Valid(duration=duration)


def _describe_seconds(seconds: float) -> str:
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    return f"{seconds:g} seconds"
