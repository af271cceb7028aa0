from .mark import MARK_COLORS, MarkColor, MarkCreate, MarkRead, mark_to_json
from .push_subscription import (
    OkResponse,
    PublicKeyRead,
    PushKeys,
    PushSubscriptionCreate,
)

__all__ = [
    "MARK_COLORS",
    "MarkColor",
    "MarkCreate",
    "MarkRead",
    "mark_to_json",
    "OkResponse",
    "PublicKeyRead",
    "PushKeys",
    "PushSubscriptionCreate",
]
