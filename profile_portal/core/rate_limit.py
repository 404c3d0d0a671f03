"""Rate limiting using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from profile_portal.config.settings import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


def reset_limiter() -> None:
    """Reset the limiter storage. Used in tests to clear rate limit state."""
    if hasattr(limiter, "_storage") and limiter._storage:
        limiter._storage.reset()
