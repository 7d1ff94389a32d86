"""
Per-identity cooldown tracker.

Unlike the IP throttle in ``app.rate_limit``, this one is keyed on the
identity itself and allows exactly one attempt per cooldown period.  The
timestamp is only recorded when an attempt is allowed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.services.clock import Clock, utc_now
from app.services.locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Denied:
    retry_after_ms: int


class CooldownLimiter:
    def __init__(self, action: str, *, clock: Clock = utc_now) -> None:
        self.action = action
        self._clock = clock
        self._last: dict[str, datetime] = {}
        self._locks = KeyedLock()

    async def try_acquire(self, identity: str, cooldown: timedelta) -> Allowed | Denied:
        async with self._locks.hold(identity):
            now = self._clock()
            last = self._last.get(identity)
            if last is not None and now - last < cooldown:
                remaining = cooldown - (now - last)
                retry_ms = -(-remaining // timedelta(milliseconds=1))
                logger.info("%s denied for %s, retry in %d ms", self.action, identity, retry_ms)
                return Denied(retry_after_ms=retry_ms)
            self._last[identity] = now
            return Allowed()

    def sweep(self, max_age: timedelta) -> int:
        """
        Forget identities whose last attempt is older than *max_age*.

        With ``max_age`` at least the cooldown, a forgotten identity would
        have been allowed anyway.
        """
        cutoff = self._clock() - max_age
        stale = [key for key, last in self._last.items() if last <= cutoff]
        for key in stale:
            del self._last[key]
        if stale:
            logger.debug("Swept %d stale %s entries", len(stale), self.action)
        return len(stale)

    def __len__(self) -> int:
        return len(self._last)
