from pydantic import BaseModel, Field

from notifyhub.domain.enums import UserRole
from notifyhub.domain.notification import FanOutResult, ReconcileResult
from notifyhub.domain.sync import SyncState


class SyncStatusResponse(BaseModel):
    state: SyncState
    queue_size: int
    processed: int
    reconnect_attempts: dict[str, int] = Field(default_factory=dict)


class RoleChangeRequest(BaseModel):
    role: UserRole
    remove_stale: bool | None = None


class ReconcileResponse(BaseModel):
    username: str
    upserted: int
    removed: int
    archived: int

    @classmethod
    def from_domain(cls, result: ReconcileResult) -> "ReconcileResponse":
        return cls(
            username=result.username, upserted=result.upserted, removed=result.removed, archived=result.archived
        )


class FanOutResponse(BaseModel):
    notification_id: str
    matched_users: int
    inserted: int
    batches_flushed: int
    batches_failed: int

    @classmethod
    def from_domain(cls, result: FanOutResult) -> "FanOutResponse":
        return cls(
            notification_id=result.notification_id,
            matched_users=result.matched_users,
            inserted=result.inserted,
            batches_flushed=result.batches_flushed,
            batches_failed=result.batches_failed,
        )


class PruneResponse(BaseModel):
    deleted: int
