from __future__ import annotations

import secrets
import string

from app.config import TEMPORARY_PASSWORD_LENGTH


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """Letters only: lower case at even positions, upper case at odd ones."""
    pools = (string.ascii_lowercase, string.ascii_uppercase)
    return "".join(secrets.choice(pools[i % 2]) for i in range(length))
