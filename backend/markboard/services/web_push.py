"""
Web Push fan-out for newly created marks.

Every push-service error is interpreted in ``classify_delivery_error``; the
dispatcher itself only switches on ``DeliveryOutcome``.
"""

import asyncio
import json
import logging
from collections import Counter
from enum import Enum
from typing import Dict, Optional

import requests
from pywebpush import WebPushException, webpush

from markboard.core.async_utils import gather_with_errors
from markboard.core.config import Settings, settings as default_settings
from markboard.models import Mark, PushSubscription
from markboard.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

# Subscription no longer exists at the push service
GONE_STATUS_CODES = {404, 410}
# Statuses that carry a key mismatch reason in the body
KEY_MISMATCH_STATUS_CODES = {400, 401, 403}
KEY_MISMATCH_MARKERS = (
    "vapidpkhashmismatch",
    "key mismatch",
    "does not correspond to the sender id",
    "invalid applicationserverkey",
)

COLOR_LABELS = {"blue": "Blue", "green": "Green", "split": "Split"}


class DeliveryOutcome(str, Enum):
    DELIVERED = "delivered"
    GONE = "gone"
    TRANSIENT_FAILURE = "transient_failure"


def _response_text(exc: WebPushException) -> str:
    try:
        return exc.response.text or ""
    except AttributeError:
        return ""


def classify_delivery_error(exc: BaseException) -> DeliveryOutcome:
    """Map a failed send to GONE (prune the subscription) or TRANSIENT_FAILURE."""
    if isinstance(exc, WebPushException) and exc.response is not None:
        status_code = getattr(exc.response, "status_code", None)
        if status_code in GONE_STATUS_CODES:
            return DeliveryOutcome.GONE
        if status_code in KEY_MISMATCH_STATUS_CODES:
            body = f"{exc.message} {_response_text(exc)}".lower()
            if any(marker in body for marker in KEY_MISMATCH_MARKERS):
                return DeliveryOutcome.GONE
    return DeliveryOutcome.TRANSIENT_FAILURE


def build_payload(mark: Mark) -> dict:
    color_name = COLOR_LABELS.get(mark.color, mark.color.title())
    return {
        "title": "New Mark!",
        "body": f"A new {color_name} mark was placed.",
        "icon": "/icons/icon-192.png",
        "data": {"id": mark.id, "url": f"/?mark={mark.id}"},
    }


class PushDispatcher:
    """Sends a notification for a mark to every stored subscription."""

    def __init__(self, store: SubscriptionStore, config: Optional[Settings] = None):
        self.store = store
        self.settings = config or default_settings

    @property
    def enabled(self) -> bool:
        return self.settings.push_enabled

    def _send(self, subscription: PushSubscription, data: str) -> None:
        webpush(
            subscription_info={
                "endpoint": subscription.endpoint,
                "keys": subscription.keys,
            },
            data=data,
            vapid_private_key=self.settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": self.settings.VAPID_SUBJECT},
            timeout=self.settings.PUSH_TIMEOUT_SECONDS,
            ttl=self.settings.PUSH_TTL_SECONDS,
        )

    async def _deliver(self, subscription: PushSubscription, data: str) -> DeliveryOutcome:
        try:
            # requests is blocking; the transport timeout bounds each attempt
            await asyncio.to_thread(self._send, subscription, data)
        except (WebPushException, requests.RequestException) as e:
            outcome = classify_delivery_error(e)
            if outcome is DeliveryOutcome.GONE:
                logger.info(f"Push subscription gone, endpoint: {subscription.endpoint[:50]}...")
            else:
                logger.warning(f"Web push failed for endpoint {subscription.endpoint[:50]}...: {e}")
            return outcome

        logger.debug(f"Web push sent, endpoint: {subscription.endpoint[:50]}...")
        return DeliveryOutcome.DELIVERED

    async def _prune(self, endpoint: str) -> None:
        try:
            await asyncio.to_thread(self.store.delete_by_endpoint, endpoint)
        except Exception as e:
            logger.error(f"Failed to delete dead push subscription {endpoint[:50]}...: {e}")

    async def dispatch(self, mark: Mark) -> Dict[DeliveryOutcome, int]:
        """
        Notify every subscriber about ``mark``.

        Deliveries run concurrently and independently. Subscriptions that the
        push service reports as gone are deleted. Never raises.
        """
        counts: Counter = Counter()
        if not self.enabled:
            logger.debug("VAPID keys not configured, skipping web push")
            return dict(counts)

        try:
            subscriptions = await asyncio.to_thread(self.store.list)
        except Exception as e:
            logger.error(f"Could not load push subscriptions for mark {mark.id}: {e}")
            return dict(counts)

        if not subscriptions:
            logger.info("No push subscriptions, nothing to send")
            return dict(counts)

        data = json.dumps(build_payload(mark))
        results = await gather_with_errors(
            *[self._deliver(subscription, data) for subscription in subscriptions]
        )

        for subscription, result in zip(subscriptions, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Unexpected web push error for endpoint {subscription.endpoint[:50]}...: {result}",
                    exc_info=result,
                )
                result = DeliveryOutcome.TRANSIENT_FAILURE
            counts[result] += 1
            if result is DeliveryOutcome.GONE:
                await self._prune(subscription.endpoint)

        logger.info(
            f"Web push for mark {mark.id}: "
            f"sent {counts[DeliveryOutcome.DELIVERED]}/{len(subscriptions)}, "
            f"pruned {counts[DeliveryOutcome.GONE]}, "
            f"failed {counts[DeliveryOutcome.TRANSIENT_FAILURE]}"
        )
        return dict(counts)
