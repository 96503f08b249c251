"""Shared rate limiter.

Uses the storage backend named by settings.rate_limit_storage_uri (for
example redis://...) so limits are shared across workers; in-memory
otherwise. Disabled entirely under TESTING.
"""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


def _enabled() -> bool:
    return settings.rate_limit_enabled and not os.environ.get("TESTING")


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=_enabled(),
    storage_uri=settings.rate_limit_storage_uri or None,
)
