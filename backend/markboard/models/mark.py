from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class Mark(SQLModel, table=True):
    """Colored pin on the map; deleted by the sweeper once expired."""

    __tablename__ = "marks"

    id: str = Field(primary_key=True, max_length=36)
    lat: float = Field(nullable=False)
    lng: float = Field(nullable=False)
    color: str = Field(max_length=16, nullable=False)
    street: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    # No length limit here; the 140 char bound is enforced by the client
    note: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
