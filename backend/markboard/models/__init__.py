from .mark import Mark
from .push_subscription import PushSubscription

__all__ = [
    "Mark",
    "PushSubscription",
]
