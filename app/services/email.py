"""
Email notifications via SMTP.

In development (no SMTP configured), emails are logged to the console
so you can see what *would* be sent without configuring a mail server.

Every message here is best-effort: ``Mailer.notify`` never raises, it logs
the failure and returns ``None`` instead of a delivery reference.
"""

from __future__ import annotations

import asyncio
import json
import logging
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any

from app.config import (
    NOTIFY_TIMEOUT,
    OTP_TTL_SECONDS,
    SMTP_FROM_EMAIL,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
    smtp_enabled,
)

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    pass


class Mailer:
    def __init__(self, *, timeout: float = NOTIFY_TIMEOUT) -> None:
        self._timeout = timeout

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        sender: str = SMTP_FROM_EMAIL,
    ) -> str:
        """Send one plain-text message and return its Message-ID."""
        message_id = make_msgid(domain=sender.rpartition("@")[2] or None)

        # ── Console fallback (dev mode) ───────────────────────────────────
        if not smtp_enabled():
            logger.info(
                "📧 [DEV] Would send email to %s:\n  Subject: %s\n  %s",
                to,
                subject,
                body,
            )
            return message_id

        # ── Real SMTP send ────────────────────────────────────────────────
        import aiosmtplib

        msg = MIMEText(body, "plain")
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to
        msg["Message-ID"] = message_id

        try:
            await aiosmtplib.send(
                msg,
                hostname=SMTP_HOST,
                port=SMTP_PORT,
                username=SMTP_USERNAME,
                password=SMTP_PASSWORD,
                start_tls=SMTP_USE_TLS,
                timeout=self._timeout,
            )
        except aiosmtplib.SMTPException as exc:
            raise NotificationError(f"Failed to send email to {to}") from exc
        logger.info("Email sent to %s (%s)", to, subject)
        return message_id

    async def notify(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        sender: str = SMTP_FROM_EMAIL,
    ) -> str | None:
        """``send`` that cannot fail the caller; problems are only logged."""
        try:
            return await asyncio.wait_for(
                self.send(to, subject, body, sender=sender),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Email to %s timed out after %ss (%s)", to, self._timeout, subject)
        except Exception:
            logger.exception("Failed to send email to %s (%s)", to, subject)
        return None


# ── Message builders ──────────────────────────────────────────────────────


def otp_message(code: str) -> tuple[str, str]:
    minutes = max(1, OTP_TTL_SECONDS // 60)
    return (
        "Your OTP for Twiller",
        f"Your OTP is {code}. It expires in {minutes} minutes.",
    )


def password_reset_message(password: str) -> tuple[str, str]:
    return (
        "Password reset for Twiller",
        f"Your temporary password is: {password}",
    )


def invoice_message(invoice: dict[str, Any]) -> tuple[str, str]:
    return (
        "Your Twiller subscription",
        f"Thank you for subscribing. Invoice: {json.dumps(invoice, default=str)}",
    )
