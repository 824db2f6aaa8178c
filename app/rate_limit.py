"""Shared rate limiter keyed by client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Registration: 5 requests per 15 minutes per client
AUTH_RATE_LIMIT = "5 per 15 minutes"

# Login stays above MAX_LOGIN_ATTEMPTS so the lockout policy answers first
LOGIN_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address, default_limits=[])
