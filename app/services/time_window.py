"""
Admission windows.

A window is a fixed interval of civil time in UTC+05:30, independent of the
server's own time zone.  The start is inclusive and the end is exclusive, so
a request at exactly 19:00 falls outside a 14:00–19:00 window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from app.config import CIVIL_UTC_OFFSET_MINUTES

_CIVIL_OFFSET = timedelta(minutes=CIVIL_UTC_OFFSET_MINUTES)
_WINDOW_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*-\s*(\d{1,2}):(\d{2})\s*$")


@dataclass(frozen=True)
class AdmissionWindow:
    name: str
    start_minutes: int
    end_minutes: int

    @classmethod
    def parse(cls, name: str, text: str) -> AdmissionWindow:
        """Build a window from an ``"HH:MM-HH:MM"`` string."""
        match = _WINDOW_RE.match(text)
        if not match:
            raise ValueError(f"Invalid window for {name!r}: {text!r}")
        sh, sm, eh, em = (int(g) for g in match.groups())
        start, end = sh * 60 + sm, eh * 60 + em
        if not (0 <= start < end <= 24 * 60) or sm > 59 or em > 59:
            raise ValueError(f"Invalid window for {name!r}: {text!r}")
        return cls(name=name, start_minutes=start, end_minutes=end)

    def describe(self) -> str:
        return f"{_hhmm(self.start_minutes)} and {_hhmm(self.end_minutes)} IST"


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def civil_minutes(now: datetime) -> int:
    """Minutes past civil midnight for an aware instant."""
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    civil = now.astimezone(timezone.utc) + _CIVIL_OFFSET
    return civil.hour * 60 + civil.minute


def is_admitted(now: datetime, window: AdmissionWindow) -> bool:
    return window.start_minutes <= civil_minutes(now) < window.end_minutes
