from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from markboard.core.exceptions import PushNotConfigured
from markboard.services.mark_store import MarkStore
from markboard.services.marks import MarkLifecycle
from markboard.services.subscription_store import SubscriptionStore
from markboard.services.web_push import PushDispatcher


def get_mark_store(request: Request) -> MarkStore:
    return request.app.state.mark_store


def get_subscription_store(request: Request) -> SubscriptionStore:
    return request.app.state.subscription_store


def get_lifecycle(request: Request) -> MarkLifecycle:
    return request.app.state.lifecycle


def get_dispatcher(request: Request) -> PushDispatcher:
    return request.app.state.dispatcher


def require_push(
    dispatcher: Annotated[PushDispatcher, Depends(get_dispatcher)],
) -> PushDispatcher:
    """Reject push endpoints with 503 when VAPID keys are not configured."""
    if not dispatcher.enabled:
        raise PushNotConfigured()
    return dispatcher


MarkStoreDep = Annotated[MarkStore, Depends(get_mark_store)]
SubscriptionStoreDep = Annotated[SubscriptionStore, Depends(get_subscription_store)]
LifecycleDep = Annotated[MarkLifecycle, Depends(get_lifecycle)]
PushDep = Annotated[PushDispatcher, Depends(require_push)]
