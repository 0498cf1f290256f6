from notifyhub.services.recycle.auto_delete import AutoDeleteService
from notifyhub.services.recycle.restore_service import RecycleBinService
from notifyhub.services.recycle.snapshot_store import SnapshotStore

__all__ = ["AutoDeleteService", "RecycleBinService", "SnapshotStore"]
