from dataclasses import dataclass
from typing import Any

from notifyhub.core.utils import StringEnum


class ChangeKind(StringEnum):
    INSERTED = "inserted"
    UPDATED = "updated"


class ChangeEntity(StringEnum):
    MASTER = "master"
    USER = "user"


class SyncState(StringEnum):
    """Live-sync lifecycle states."""

    IDLE = "idle"
    RUNNING = "running"
    DEGRADED = "degraded"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class ChangeEvent:
    kind: ChangeKind
    entity: ChangeEntity
    document: dict[str, Any]
    updated_fields: dict[str, Any] | None = None


__all__ = ["ChangeEntity", "ChangeEvent", "ChangeKind", "SyncState"]
