from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from markboard.utils import as_utc

MarkColor = Literal["blue", "green", "split"]
MARK_COLORS = ("blue", "green", "split")


class MarkCreate(BaseModel):
    """Payload for dropping a new mark."""

    # strict: "50.4" or true are not coordinates
    lat: float = Field(..., strict=True, allow_inf_nan=False)
    lng: float = Field(..., strict=True, allow_inf_nan=False)
    color: MarkColor
    note: Optional[str] = None


class MarkRead(BaseModel):
    """Mark as returned over HTTP and the live-update channel."""

    id: str
    lat: float
    lng: float
    color: str
    street: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")
    expires_at: datetime = Field(serialization_alias="expiresAt")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "expires_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return as_utc(value).isoformat().replace("+00:00", "Z")


def mark_to_json(mark) -> dict:
    """Render a Mark row as the JSON-ready dict clients receive."""
    return MarkRead.model_validate(mark).model_dump(mode="json", by_alias=True)
