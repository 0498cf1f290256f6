from notifyhub.services.live_sync.watcher import LiveSyncService, to_change_event

__all__ = ["LiveSyncService", "to_change_event"]
