"""
Submission gateway.

Decides whether a gated write request is admitted at all.  Each flow runs
its checks in a fixed order and stops at the first failure:

  upload          fields → stage → otp → upload window → file → duration → consume otp
  password reset  fields → cooldown
  subscribe       fields → payment window → plan

Only a fully admitted request builds a record and hands it to the store.
An audio upload's staged file is either promoted into a post or deleted,
whichever way the request ends.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from app import config
from app.db import Store
from app.outcomes import Admitted, Outcome, Rejected, RejectReason
from app.services.clock import Clock, utc_now
from app.services.cooldown import CooldownLimiter, Denied
from app.services.credentials import generate_temporary_password
from app.services.email import (
    Mailer,
    invoice_message,
    otp_message,
    password_reset_message,
)
from app.services.otp import OtpCheck, OtpRegistry
from app.services.storage import (
    ArtifactStorage,
    ArtifactTooLarge,
    IncomingFile,
    StagedArtifact,
    UnsupportedMediaType,
)
from app.services.time_window import AdmissionWindow, is_admitted
from app.services.upload_validator import Invalid, UploadValidator

logger = logging.getLogger(__name__)

_OTP_REJECTIONS = {
    OtpCheck.NO_ENTRY: RejectReason.OTP_NO_ENTRY,
    OtpCheck.EXPIRED: RejectReason.OTP_EXPIRED,
    OtpCheck.MISMATCH: RejectReason.OTP_MISMATCH,
}


def normalize_identity(raw: str | None) -> str | None:
    if raw is None:
        return None
    cleaned = raw.strip().lower()
    return cleaned or None


class SubmissionGateway:
    def __init__(
        self,
        *,
        store: Store,
        storage: ArtifactStorage,
        mailer: Mailer,
        validator: UploadValidator | None = None,
        clock: Clock = utc_now,
        upload_window: AdmissionWindow | None = None,
        payment_window: AdmissionWindow | None = None,
        reset_cooldown: timedelta = timedelta(seconds=config.PASSWORD_RESET_COOLDOWN_SECONDS),
        plan_amounts: dict[str, int] | None = None,
    ) -> None:
        self.store = store
        self.storage = storage
        self.mailer = mailer
        self.validator = validator or UploadValidator()
        self.clock = clock
        self.otp = OtpRegistry(clock=clock)
        self.reset_limiter = CooldownLimiter("password-reset", clock=clock)
        self.upload_window = upload_window or AdmissionWindow.parse("uploads", config.UPLOAD_WINDOW)
        self.payment_window = payment_window or AdmissionWindow.parse("payments", config.PAYMENT_WINDOW)
        self.reset_cooldown = reset_cooldown
        self.plan_amounts = dict(config.PLAN_AMOUNTS if plan_amounts is None else plan_amounts)

    # ── One-time codes ────────────────────────────────────────────────────

    async def issue_otp(self, email: str | None) -> Outcome:
        identity = normalize_identity(email)
        if identity is None:
            return Rejected(RejectReason.MISSING_FIELDS, "email required")

        entry = await self.otp.issue(identity)
        subject, body = otp_message(entry.code)
        await self.mailer.notify(identity, subject, body)
        return Admitted({"acknowledged": True, "expiresAt": entry.expires_at})

    async def verify_otp(self, email: str | None, code: str | None) -> Outcome:
        identity = normalize_identity(email)
        if identity is None or not (code or "").strip():
            return Rejected(RejectReason.MISSING_FIELDS, "email and code required")

        result = await self.otp.verify(identity, code)
        if result is not OtpCheck.ACCEPTED:
            return Rejected(_OTP_REJECTIONS[result])
        return Admitted({"acknowledged": True})

    # ── Audio upload ──────────────────────────────────────────────────────

    async def submit_audio(
        self,
        email: str | None,
        otp: str | None,
        upload: IncomingFile | None,
    ) -> Outcome:
        identity = normalize_identity(email)
        code = (otp or "").strip()
        if identity is None or not code:
            # Nothing staged yet, so nothing to clean up.
            return Rejected(RejectReason.MISSING_FIELDS, "email and otp required")

        artifact: StagedArtifact | None = None
        promoted = False
        try:
            if upload is not None:
                try:
                    artifact = await self.storage.stage(upload)
                except UnsupportedMediaType:
                    return Rejected(RejectReason.UNSUPPORTED_MEDIA)
                except ArtifactTooLarge:
                    return Rejected(RejectReason.TOO_LARGE)

            outcome = await self._admit_audio(identity, code, artifact)
            promoted = isinstance(outcome, Admitted)
            return outcome
        except Exception:
            logger.exception(
                "Audio upload failed for %s (artifact=%s)",
                identity,
                artifact.path if artifact else None,
            )
            return Rejected(RejectReason.INTERNAL)
        finally:
            if artifact is not None and not promoted:
                await self._discard(artifact)

    async def _admit_audio(
        self,
        identity: str,
        code: str,
        artifact: StagedArtifact | None,
    ) -> Outcome:
        # Peek only: a rejection further down must leave the code usable.
        if await self.otp.peek(identity, code) is not OtpCheck.ACCEPTED:
            return Rejected(RejectReason.INVALID_OTP)

        now = self.clock()
        if not is_admitted(now, self.upload_window):
            return Rejected(
                RejectReason.OUTSIDE_WINDOW,
                f"audio uploads allowed only between {self.upload_window.describe()}",
            )

        if artifact is None:
            return Rejected(RejectReason.NO_FILE)

        verdict = await self.validator.validate(artifact.path)
        if isinstance(verdict, Invalid):
            logger.info("Rejected %s from %s: %s", artifact.filename, identity, verdict.reason.code)
            return Rejected(verdict.reason, verdict.message)

        # A concurrent upload may have consumed the code since the peek.
        if await self.otp.verify(identity, code) is not OtpCheck.ACCEPTED:
            return Rejected(RejectReason.INVALID_OTP)

        post: dict[str, Any] = {
            "type": "audio",
            "email": identity,
            "file": artifact.filename,
            "duration": verdict.duration,
            "createdAt": now.isoformat(),
        }
        post["_id"] = await self.store.insert("posts", post)
        logger.info("Audio post %s admitted for %s (%.1fs)", post["_id"], identity, verdict.duration)
        return Admitted({"acknowledged": True, "post": post})

    async def _discard(self, artifact: StagedArtifact) -> None:
        try:
            await self.storage.delete(artifact.path)
        except Exception:
            logger.exception("Could not delete staged artifact %s", artifact.path)

    # ── Password reset ────────────────────────────────────────────────────

    async def request_password_reset(self, email: str | None) -> Outcome:
        identity = normalize_identity(email)
        if identity is None:
            return Rejected(RejectReason.MISSING_FIELDS, "email required")

        acquired = await self.reset_limiter.try_acquire(identity, self.reset_cooldown)
        if isinstance(acquired, Denied):
            return Rejected(
                RejectReason.TOO_SOON,
                "You can request forgot password only once per cooldown period",
                retry_after_ms=acquired.retry_after_ms,
            )

        # TODO: hash and store the temporary password once user credentials are persisted.
        password = generate_temporary_password()
        subject, body = password_reset_message(password)
        await self.mailer.notify(identity, subject, body)
        return Admitted({"acknowledged": True, "note": "Password reset email sent"})

    # ── Subscription ──────────────────────────────────────────────────────

    async def subscribe(self, email: str | None, plan: str | None) -> Outcome:
        identity = normalize_identity(email)
        plan = (plan or "").strip().lower()
        if identity is None or not plan:
            return Rejected(RejectReason.MISSING_FIELDS, "email and plan required")

        now = self.clock()
        if not is_admitted(now, self.payment_window):
            return Rejected(
                RejectReason.OUTSIDE_WINDOW,
                f"Payments allowed only between {self.payment_window.describe()}",
            )

        amount = self.plan_amounts.get(plan)
        if amount is None:
            return Rejected(RejectReason.UNKNOWN_PLAN, f"unknown plan {plan!r}")

        invoice = {"email": identity, "plan": plan, "amount": amount, "date": now.isoformat()}
        subject, body = invoice_message(invoice)
        await self.mailer.notify(identity, subject, body, sender=config.BILLING_FROM_EMAIL)
        return Admitted({"acknowledged": True, "invoice": invoice})

    # ── Housekeeping ──────────────────────────────────────────────────────

    def housekeeping(self) -> None:
        """Drop expired codes and cooldown entries that can no longer deny."""
        purged = self.otp.purge_expired()
        swept = self.reset_limiter.sweep(self.reset_cooldown)
        if purged or swept:
            logger.info("Housekeeping removed %d expired OTPs, %d cooldown entries", purged, swept)
