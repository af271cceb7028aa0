"""Durable table of Web Push subscriptions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from markboard.models import PushSubscription
from markboard.services.mark_store import store_session

logger = logging.getLogger(__name__)


class SubscriptionStore:
    """Subscriptions are keyed by endpoint for every write."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list(self) -> List[PushSubscription]:
        with store_session(self.engine) as session:
            return list(session.exec(select(PushSubscription)).all())

    def insert(self, endpoint: str, keys: Dict[str, Any]) -> PushSubscription:
        """Create a subscription, or refresh the keys of an existing endpoint."""
        with store_session(self.engine) as session:
            statement = select(PushSubscription).where(PushSubscription.endpoint == endpoint)
            existing = session.exec(statement).first()

            if existing:
                existing.keys = dict(keys)
                session.add(existing)
                session.commit()
                session.refresh(existing)
                logger.info(f"Refreshed push subscription {endpoint[:50]}...")
                return existing

            subscription = PushSubscription(endpoint=endpoint, keys=dict(keys))
            session.add(subscription)
            try:
                session.commit()
            except IntegrityError:
                # Lost a race with a concurrent subscribe for the same endpoint
                session.rollback()
                winner = session.exec(statement).one()
                logger.info(f"Push subscription {endpoint[:50]}... already stored")
                return winner
            session.refresh(subscription)
            logger.info(f"Stored push subscription {endpoint[:50]}...")
            return subscription

    def delete_by_endpoint(self, endpoint: str) -> int:
        """Remove every row for ``endpoint``. Unknown endpoints are a no-op."""
        with store_session(self.engine) as session:
            result = session.exec(
                delete(PushSubscription).where(PushSubscription.endpoint == endpoint)
            )
            session.commit()
            deleted = result.rowcount or 0

        if deleted:
            logger.info(f"Deleted push subscription {endpoint[:50]}...")
        return deleted
