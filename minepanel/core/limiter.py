"""
Shared slowapi rate limiter instance.

Mounted on ``app.state.limiter`` in main.py and applied per route with
``@limiter.limit()``; one instance so all routes share one counter store.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from minepanel.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)
