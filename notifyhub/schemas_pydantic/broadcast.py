from typing import Any

from pydantic import BaseModel, Field

from notifyhub.core.utils import format_timestamp, utc_now
from notifyhub.domain.enums import BroadcastEvent


class RoomMessage(BaseModel):
    """Envelope published on a room channel."""

    event: BroadcastEvent
    room: str
    payload: dict[str, Any] = Field(default_factory=dict)
    sent_at: str = Field(default_factory=lambda: format_timestamp(utc_now()))
