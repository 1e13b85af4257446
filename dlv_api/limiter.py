"""
Shared Rate Limiter Instance

Kept in its own module so routers and the app factory can import it
without circular imports.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from dlv_api.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.RATE_LIMIT_ENABLED,
)
