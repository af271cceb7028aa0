from .config import settings
from .exceptions import (
    ConstraintViolation,
    MarkboardError,
    PushNotConfigured,
    StoreUnavailable,
)

__all__ = [
    "settings",
    "ConstraintViolation",
    "MarkboardError",
    "PushNotConfigured",
    "StoreUnavailable",
]
