"""Rate limiting configuration."""

from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from markboard.core.config import settings

logger = logging.getLogger(__name__)

# memory:// by default; point RATE_LIMIT_STORAGE_URI at redis:// when needed
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    headers_enabled=False,
)
logger.info(f"Rate limiter configured with storage: {settings.RATE_LIMIT_STORAGE_URI}")
