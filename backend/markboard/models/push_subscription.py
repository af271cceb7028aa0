from __future__ import annotations

from datetime import datetime
from typing import Any, Dict
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from markboard.utils import utcnow


def _new_id() -> str:
    return str(uuid4())


class PushSubscription(SQLModel, table=True):
    """Web Push subscription for browser notifications."""

    __tablename__ = "push_subscriptions"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=36)
    endpoint: str = Field(max_length=1000, nullable=False, unique=True, index=True)
    # {"p256dh": "...", "auth": "..."}
    keys: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
