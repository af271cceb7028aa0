"""Durable table of marks."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlmodel import Session, col, select

from markboard.core.exceptions import ConstraintViolation, StoreUnavailable
from markboard.models import Mark
from markboard.utils import utcnow

logger = logging.getLogger(__name__)


@contextmanager
def store_session(engine: Engine) -> Iterator[Session]:
    """Open a session and translate driver failures into StoreUnavailable."""
    try:
        with Session(engine) as session:
            yield session
    except IntegrityError:
        raise
    except DBAPIError as e:
        logger.error(f"Database error: {e}")
        raise StoreUnavailable(str(e.orig) if e.orig else str(e)) from e


class MarkStore:
    """All reads and writes of the marks table go through here."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_live(self, now: Optional[datetime] = None) -> List[Mark]:
        """Marks with expires_at strictly after now, in no particular order."""
        now = now or utcnow()
        with store_session(self.engine) as session:
            statement = select(Mark).where(Mark.expires_at > now)
            return list(session.exec(statement).all())

    def insert(self, mark: Mark) -> Mark:
        with store_session(self.engine) as session:
            session.add(mark)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise ConstraintViolation(f"Mark {mark.id} already exists") from e
            session.refresh(mark)
            return mark

    def delete_expired(self, now: Optional[datetime] = None) -> List[str]:
        """
        Delete every mark with expires_at <= now and return their ids.

        The ids are selected and deleted in one transaction, and only the
        selected ids are deleted, so a mark inserted while the sweep runs
        is never removed by it.
        """
        now = now or utcnow()
        with store_session(self.engine) as session:
            statement = select(Mark.id).where(Mark.expires_at <= now)
            ids = list(session.exec(statement).all())
            if not ids:
                return []

            session.exec(delete(Mark).where(col(Mark.id).in_(ids)))
            session.commit()

        logger.info(f"Deleted {len(ids)} expired mark(s)")
        return ids
