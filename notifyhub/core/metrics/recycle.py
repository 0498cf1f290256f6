from notifyhub.core.metrics.base import BaseMetrics


class RecycleMetrics(BaseMetrics):
    """Metrics for recycle-bin restore and permanent delete."""

    def _create_instruments(self) -> None:
        self.restores = self._meter.create_counter(
            name="recyclebin.restores.total", description="Restore attempts by outcome", unit="1"
        )

        self.purges = self._meter.create_counter(
            name="recyclebin.purges.total", description="Permanent delete attempts by outcome", unit="1"
        )

        self.denied = self._meter.create_counter(
            name="recyclebin.denied.total", description="Calls rejected by the role gate", unit="1"
        )

        self.auto_deleted = self._meter.create_counter(
            name="recyclebin.auto_delete.users.total", description="Users matched by auto-delete runs", unit="1"
        )

    def record_restore(self, category: str, source: str, success: bool) -> None:
        self.restores.add(1, attributes={"category": category, "source": source, "success": str(success)})

    def record_purge(self, category: str, success: bool) -> None:
        self.purges.add(1, attributes={"category": category, "success": str(success)})

    def record_denied(self, action: str, role: str) -> None:
        self.denied.add(1, attributes={"action": action, "role": role})

    def record_auto_delete(self, mode: str, users: int, success: bool) -> None:
        self.auto_deleted.add(users, attributes={"mode": mode, "success": str(success)})
