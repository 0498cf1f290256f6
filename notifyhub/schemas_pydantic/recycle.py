from typing import Any

from pydantic import BaseModel, Field

from notifyhub.domain.enums import NotificationCategory
from notifyhub.domain.recycle import RecoverySource, RecycleResult


class RestoreRequestIn(BaseModel):
    """Recovery material, in priority order: ref_id, inline snapshot, stored snapshot path."""

    category: str
    ref_id: str | None = None
    snapshot: dict[str, Any] | None = None
    snapshot_path: str | None = None


class RecycleResponse(BaseModel):
    category: NotificationCategory
    action: str
    source: RecoverySource | None = None
    ids: list[str] = Field(default_factory=list)
    message: str
    rooms: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, result: RecycleResult) -> "RecycleResponse":
        return cls(
            category=result.category,
            action=result.action,
            source=result.source,
            ids=result.ids,
            message=result.message,
            rooms=result.rooms,
        )
