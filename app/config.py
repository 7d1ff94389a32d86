"""
Application configuration from environment variables.

All settings have sensible defaults for local development.
A .env file in the project root is loaded automatically (if present).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
APP_VERSION: str = "0.1.0"

# ── Paths ─────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# SQLite document store. Leave empty to run on the in-process memory store.
DB_PATH: str = os.getenv("DB_PATH", "")

# Staged audio uploads live here until they are promoted or deleted.
UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", str(PROJECT_ROOT / "uploads"))

# ── One-time codes ────────────────────────────────────────────────────────

OTP_LENGTH: int = 6
OTP_TTL_SECONDS: int = int(os.getenv("OTP_TTL_SECONDS", "300"))

# ── Admission windows (UTC+05:30 civil time, end exclusive) ───────────────

CIVIL_UTC_OFFSET_MINUTES: int = 5 * 60 + 30
UPLOAD_WINDOW: str = os.getenv("UPLOAD_WINDOW", "14:00-19:00")
PAYMENT_WINDOW: str = os.getenv("PAYMENT_WINDOW", "10:00-11:00")

# ── Password reset ────────────────────────────────────────────────────────

PASSWORD_RESET_COOLDOWN_SECONDS: int = int(
    os.getenv("PASSWORD_RESET_COOLDOWN_SECONDS", str(24 * 60 * 60))
)
TEMPORARY_PASSWORD_LENGTH: int = 12

# ── Uploads ───────────────────────────────────────────────────────────────

MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))
MAX_AUDIO_SECONDS: float = float(os.getenv("MAX_AUDIO_SECONDS", "300"))
MEDIA_DECODE_TIMEOUT: float = float(os.getenv("MEDIA_DECODE_TIMEOUT", "30"))

# ── Billing ───────────────────────────────────────────────────────────────

PLAN_AMOUNTS: dict[str, int] = {
    "free": 0,
    "bronze": 100,
    "silver": 300,
    "gold": 1000,
}

# ── SMTP ──────────────────────────────────────────────────────────────────

SMTP_HOST: str = os.getenv("SMTP_HOST", "")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", "no-reply@twiller.test")
BILLING_FROM_EMAIL: str = os.getenv("BILLING_FROM_EMAIL", "billing@twiller.test")
SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

# Set to "false" to force console-only mode even when SMTP credentials are present.
_SMTP_ENABLED_OVERRIDE: str = os.getenv("SMTP_ENABLED", "auto")

# Upper bound on a single notification attempt (seconds).
NOTIFY_TIMEOUT: float = float(os.getenv("NOTIFY_TIMEOUT", "10"))


def smtp_enabled() -> bool:
    """True when SMTP should actually send emails.

    Controlled by SMTP_ENABLED env var:
      • "auto" (default): send if credentials are configured
      • "true": always send (will fail if credentials are missing)
      • "false": never send, log to console instead
    """
    if _SMTP_ENABLED_OVERRIDE.lower() == "false":
        return False
    if _SMTP_ENABLED_OVERRIDE.lower() == "true":
        return True
    return bool(SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD)


# ── Housekeeping ──────────────────────────────────────────────────────────

# How often expired OTPs and stale cooldown entries are swept (seconds).
HOUSEKEEPING_INTERVAL: float = float(os.getenv("HOUSEKEEPING_INTERVAL", "3600"))
