"""
Typed outcomes of gated requests.

Every check in the gateway returns one of these instead of raising.
Routers turn a ``Rejected`` into an HTTP error via ``raise_for_rejection``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Coarse error taxonomy shared by all rejection reasons."""

    VALIDATION = "validation_error"
    AUTH = "auth_error"
    POLICY_DENIED = "policy_denied_error"
    PAYLOAD = "payload_error"
    INTERNAL = "internal_error"


class RejectReason(Enum):
    # (code, kind, http status, default message)
    MISSING_FIELDS = ("missing_fields", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "required fields missing")
    OTP_NO_ENTRY = ("no_entry", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "no otp requested")
    OTP_EXPIRED = ("expired", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "otp expired")
    OTP_MISMATCH = ("mismatch", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "invalid otp")
    INVALID_OTP = ("invalid_otp", ErrorKind.AUTH, status.HTTP_403_FORBIDDEN, "invalid or expired otp")
    OUTSIDE_WINDOW = ("outside_window", ErrorKind.POLICY_DENIED, status.HTTP_403_FORBIDDEN, "request outside the admission window")
    TOO_SOON = ("too_soon", ErrorKind.POLICY_DENIED, status.HTTP_429_TOO_MANY_REQUESTS, "request repeated too soon")
    NO_FILE = ("no_file", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "no audio file uploaded")
    UNSUPPORTED_MEDIA = ("unsupported_media", ErrorKind.PAYLOAD, status.HTTP_400_BAD_REQUEST, "only audio files are allowed")
    TOO_LARGE = ("too_large", ErrorKind.PAYLOAD, status.HTTP_413_CONTENT_TOO_LARGE, "audio file too large")
    TOO_LONG = ("too_long", ErrorKind.PAYLOAD, status.HTTP_400_BAD_REQUEST, "audio longer than the allowed duration")
    DECODE_ERROR = ("decode_error", ErrorKind.PAYLOAD, status.HTTP_400_BAD_REQUEST, "audio file could not be decoded")
    UNKNOWN_PLAN = ("unknown_plan", ErrorKind.VALIDATION, status.HTTP_400_BAD_REQUEST, "unknown subscription plan")
    INTERNAL = ("internal", ErrorKind.INTERNAL, status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")

    def __init__(self, code: str, kind: ErrorKind, status_code: int, message: str) -> None:
        self.code = code
        self.kind = kind
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class Admitted:
    """Terminal success; ``payload`` is what the endpoint returns."""

    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Rejected:
    """Terminal failure, always with a reason."""

    reason: RejectReason
    message: str | None = None
    retry_after_ms: int | None = None

    @property
    def error(self) -> str:
        return self.message or self.reason.message


Outcome = Admitted | Rejected


def raise_for_rejection(outcome: Outcome) -> dict[str, Any]:
    """Return the admitted payload or raise the matching HTTPException."""
    if isinstance(outcome, Admitted):
        return outcome.payload

    headers = None
    if outcome.retry_after_ms is not None:
        # Retry-After is whole seconds, rounded up
        headers = {"Retry-After": str(-(-outcome.retry_after_ms // 1000))}
    raise HTTPException(
        status_code=outcome.reason.status_code,
        detail={
            "error": outcome.error,
            "reason": outcome.reason.code,
            "kind": outcome.reason.kind.value,
            "retry_after_ms": outcome.retry_after_ms,
        },
        headers=headers,
    )
