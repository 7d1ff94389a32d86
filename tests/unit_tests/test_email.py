"""Tests for the best-effort mailer."""

import asyncio
import logging

from app.services import email as email_mod
from app.services.email import Mailer, invoice_message, otp_message, password_reset_message
from tests.mocks.services import FailingMailer


class TestNotify:
    async def test_console_mode_returns_reference(self, monkeypatch, caplog):
        monkeypatch.setattr(email_mod, "smtp_enabled", lambda: False)
        with caplog.at_level(logging.INFO, logger="app.services.email"):
            ref = await Mailer().notify("a@x.com", "Hi", "body text")
        assert ref is not None and ref.startswith("<")
        assert "Would send email to a@x.com" in caplog.text

    async def test_failure_is_logged_not_raised(self, caplog):
        mailer = FailingMailer()
        with caplog.at_level(logging.ERROR, logger="app.services.email"):
            ref = await mailer.notify("a@x.com", "Hi", "body")
        assert ref is None
        assert mailer.attempts == 1
        assert "Failed to send email to a@x.com" in caplog.text

    async def test_timeout_is_logged_not_raised(self, caplog):
        class _Hanging(Mailer):
            async def send(self, to, subject, body, *, sender="x@y"):
                await asyncio.sleep(5)
                return "never"

        with caplog.at_level(logging.WARNING, logger="app.services.email"):
            ref = await _Hanging(timeout=0.05).notify("a@x.com", "Hi", "body")
        assert ref is None
        assert "timed out" in caplog.text


class TestMessages:
    def test_otp_message_mentions_code_and_expiry(self):
        subject, body = otp_message("012345")
        assert "OTP" in subject
        assert "012345" in body
        assert "5 minutes" in body

    def test_password_reset_message(self):
        _, body = password_reset_message("aBcDeFgHiJkL")
        assert body.endswith("aBcDeFgHiJkL")

    def test_invoice_message(self):
        _, body = invoice_message({"plan": "gold", "amount": 1000})
        assert '"amount": 1000' in body
