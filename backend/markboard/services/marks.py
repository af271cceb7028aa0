"""Mark creation: validate, commit, then signal the broadcaster and push."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any, Mapping, Optional
from uuid import uuid4

from markboard.core.async_utils import run_in_background
from markboard.models import Mark
from markboard.schemas import MarkCreate
from markboard.services.mark_store import MarkStore
from markboard.services.web_push import PushDispatcher
from markboard.services.websocket_manager import ConnectionManager
from markboard.utils import utcnow

logger = logging.getLogger(__name__)

MARK_TTL = timedelta(minutes=30)
# Geocoding is not wired in; every mark gets the same label
DEFAULT_STREET = "Location"


def normalize_note(note: Optional[str]) -> Optional[str]:
    """Trim the note; blank notes are stored as NULL, never as ""."""
    if note is None:
        return None
    note = note.strip()
    return note or None


class MarkLifecycle:
    def __init__(
        self,
        store: MarkStore,
        broadcaster: ConnectionManager,
        dispatcher: Optional[PushDispatcher] = None,
        ttl: timedelta = MARK_TTL,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self.dispatcher = dispatcher
        self.ttl = ttl

    def build_mark(self, payload: MarkCreate) -> Mark:
        created_at = utcnow()
        return Mark(
            id=str(uuid4()),
            lat=payload.lat,
            lng=payload.lng,
            color=payload.color,
            street=DEFAULT_STREET,
            note=normalize_note(payload.note),
            created_at=created_at,
            expires_at=created_at + self.ttl,
        )

    async def create_mark(self, payload: MarkCreate | Mapping[str, Any]) -> Mark:
        """
        Persist a new mark and announce it.

        Raises pydantic ``ValidationError`` for bad input and store errors
        from the insert. Once the insert succeeds the mark is returned;
        broadcast and push failures are only logged.
        """
        if not isinstance(payload, MarkCreate):
            payload = MarkCreate.model_validate(payload)

        mark = await asyncio.to_thread(self.store.insert, self.build_mark(payload))
        logger.info(f"Created mark {mark.id} ({mark.color}) expiring at {mark.expires_at.isoformat()}")

        try:
            await self.broadcaster.publish_created(mark)
        except Exception as e:
            logger.error(f"Failed to broadcast mark {mark.id}: {e}", exc_info=True)

        if self.dispatcher is not None and self.dispatcher.enabled:
            try:
                run_in_background(self.dispatcher.dispatch(mark), name=f"push-{mark.id}")
            except Exception as e:
                logger.error(f"Failed to start web push for mark {mark.id}: {e}", exc_info=True)

        return mark

    async def list_live(self) -> list[Mark]:
        return await asyncio.to_thread(self.store.list_live)
