"""
Rate limiting - shared slowapi limiter keyed by client address.

Decorated endpoints must accept a `request: Request` argument.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import get_settings

settings = get_settings()

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
