from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from notifyhub.core.utils import StringEnum
from notifyhub.domain.enums.notification import NotificationCategory
from notifyhub.domain.user import AutoDeleteCandidate


class RecoverySource(StringEnum):
    REF_ID = "ref_id"
    INLINE_SNAPSHOT = "inline_snapshot"
    STORED_SNAPSHOT = "stored_snapshot"


@dataclass
class RestoreRequest:
    category: str
    ref_id: str | None = None
    snapshot: dict[str, Any] | None = None
    snapshot_path: str | None = None


@dataclass
class PurgeRequest:
    category: str
    ref_id: str | None = None


@dataclass
class RecoveryMaterial:
    source: RecoverySource
    ref_id: str | None = None
    snapshot: dict[str, Any] | None = None


@dataclass
class RestoreOutcome:
    ok: bool
    restored_ids: list[str] = field(default_factory=list)
    message: str = ""


@dataclass
class PurgeOutcome:
    ok: bool
    message: str = ""


@dataclass
class RecycleResult:
    """What the orchestrator reports back (and broadcasts) after a successful call."""

    category: NotificationCategory
    action: str
    source: RecoverySource | None
    ids: list[str]
    message: str
    rooms: list[str]


AUTO_DELETE_FOLDER = "auto-delete-users"


class AutoDeleteMode(StringEnum):
    DRY_RUN = "dry-run"
    DELETE = "delete"


@dataclass
class AutoDeleteReport:
    """Outcome of one auto-delete run, mirrored into the admin notification's metadata."""

    run_mode: AutoDeleteMode
    cutoff: datetime
    executed_at: datetime
    recycle_folder: str
    users: list[AutoDeleteCandidate] = field(default_factory=list)
    deleted_count: int = 0
    backup_path: str | None = None
    error: str | None = None


# Category -> storage folder (snapshots) and collection (domain records).
CATEGORY_FOLDER_MAP: dict[NotificationCategory, str] = {
    NotificationCategory.USER: "users",
    NotificationCategory.TENANT: "tenants",
    NotificationCategory.PROPERTY: "properties",
    NotificationCategory.LEASE: "leases",
    NotificationCategory.AGENT: "agents",
    NotificationCategory.DEVELOPER: "developers",
    NotificationCategory.MAINTENANCE: "maintenance",
    NotificationCategory.COMPLAINT: "complaints",
    NotificationCategory.TEAM: "teams",
    NotificationCategory.REGISTRATION: "registrations",
    NotificationCategory.PAYMENT: "payments",
    NotificationCategory.SYSTEM: "system",
}


def is_safe_ref_id(ref_id: str) -> bool:
    """A ref_id doubles as a snapshot folder name, so it must stay a single path segment."""
    return bool(ref_id) and ".." not in ref_id and not any(sep in ref_id for sep in ("/", "\\", "\x00"))
