"""Shared rate limiter, keyed by client IP.

Uses the configured storage URI (e.g. memcached://, redis://) when set so
limits are shared across workers; otherwise limits live in process memory.
"""

from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

# Per-route limits
AUTH_LIMIT = "10/minute"
IMPORT_LIMIT = "5/minute"


def _resolve_storage() -> str | None:
    if not settings.rate_limit_storage_uri:
        return None
    logger.info("Rate limiter using shared storage")
    return settings.rate_limit_storage_uri


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
    storage_uri=_resolve_storage(),
)
