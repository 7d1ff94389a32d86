"""
Test doubles for the gateway's collaborators.

None of these touch the network; time only moves when a test moves it.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from app.services.email import Mailer, NotificationError


class FakeClock:
    """A settable UTC clock usable anywhere a ``Clock`` is expected."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer(Mailer):
    """Keeps every message instead of sending it."""

    def __init__(self) -> None:
        super().__init__(timeout=1)
        self.sent: list[dict[str, str]] = []

    async def send(self, to: str, subject: str, body: str, *, sender: str = "no-reply@twiller.test") -> str:
        self.sent.append({"to": to, "subject": subject, "body": body, "sender": sender})
        return f"<msg-{len(self.sent)}@twiller.test>"

    def last_to(self, to: str) -> dict[str, str]:
        return [m for m in self.sent if m["to"] == to][-1]


class FailingMailer(Mailer):
    """Every send blows up, like an SMTP outage."""

    def __init__(self) -> None:
        super().__init__(timeout=1)
        self.attempts = 0

    async def send(self, to: str, subject: str, body: str, *, sender: str = "no-reply@twiller.test") -> str:
        self.attempts += 1
        raise NotificationError("smtp down")


class StubDecoder:
    """Stands in for ``decode_duration``; durations are keyed by file suffix."""

    def __init__(self, default: float = 60.0) -> None:
        self.default = default
        self.durations: dict[str, float | Exception] = {}
        self.calls: list[str] = []

    def __call__(self, path: str) -> float:
        self.calls.append(path)
        for suffix, result in self.durations.items():
            if path.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                return result
        return self.default
