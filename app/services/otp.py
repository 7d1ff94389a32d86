"""
One-time code registry.

Codes live in process memory only, one live entry per identity.  Issuing a
new code overwrites the previous one; a successful ``verify`` consumes it.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from app.config import OTP_LENGTH, OTP_TTL_SECONDS
from app.services.clock import Clock, utc_now
from app.services.locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpEntry:
    identity: str
    code: str
    expires_at: datetime


class OtpCheck(str, Enum):
    ACCEPTED = "accepted"
    NO_ENTRY = "no_entry"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


class OtpRegistry:
    def __init__(
        self,
        *,
        ttl_seconds: int = OTP_TTL_SECONDS,
        code_length: int = OTP_LENGTH,
        clock: Clock = utc_now,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._code_length = code_length
        self._clock = clock
        self._entries: dict[str, OtpEntry] = {}
        self._locks = KeyedLock()

    async def issue(self, identity: str) -> OtpEntry:
        """Generate a fresh code for *identity*, replacing any earlier one."""
        entry = OtpEntry(
            identity=identity,
            code=self._generate_code(),
            expires_at=self._clock() + self._ttl,
        )
        async with self._locks.hold(identity):
            self._entries[identity] = entry
        logger.info("OTP issued for %s (expires %s)", identity, entry.expires_at.isoformat())
        return entry

    async def verify(self, identity: str, code: str) -> OtpCheck:
        """Check *code* and consume the entry when it is accepted."""
        async with self._locks.hold(identity):
            result = self._check(identity, code)
            if result is OtpCheck.ACCEPTED:
                del self._entries[identity]
        return result

    async def peek(self, identity: str, code: str) -> OtpCheck:
        """Same checks as ``verify`` but never consumes the entry."""
        async with self._locks.hold(identity):
            return self._check(identity, code)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _check(self, identity: str, code: str) -> OtpCheck:
        entry = self._entries.get(identity)
        if entry is None:
            return OtpCheck.NO_ENTRY
        # The expiry instant itself already counts as expired.
        if self._clock() >= entry.expires_at:
            return OtpCheck.EXPIRED
        if entry.code != code.strip():
            return OtpCheck.MISMATCH
        return OtpCheck.ACCEPTED

    def _generate_code(self) -> str:
        return f"{secrets.randbelow(10 ** self._code_length):0{self._code_length}d}"

    def __len__(self) -> int:
        return len(self._entries)
