"""
IP-level request throttling using slowapi.

This sits in front of the gateway and only protects the transport
(mail quota, code guessing).  The one-reset-per-day rule is enforced per
identity by ``app.services.cooldown`` instead.

Tiers:
  • strict – 5/min  (endpoints that send email)
  • auth   – 10/min (endpoints that check a one-time code)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

STRICT = "5/minute"
AUTH = "10/minute"
