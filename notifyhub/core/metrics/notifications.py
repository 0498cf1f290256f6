from notifyhub.core.metrics.base import BaseMetrics


class NotificationMetrics(BaseMetrics):
    """Metrics for notification fan-out, listing and per-user state."""

    def _create_instruments(self) -> None:
        self.notifications_created = self._meter.create_counter(
            name="notifications.created.total", description="Total notification masters created", unit="1"
        )

        # Fan-out
        self.fanout_rows_inserted = self._meter.create_counter(
            name="notification.fanout.rows.inserted.total",
            description="State rows created by fan-out",
            unit="1",
        )

        self.fanout_batches_flushed = self._meter.create_counter(
            name="notification.fanout.batches.flushed.total", description="Fan-out batches written", unit="1"
        )

        self.fanout_batches_failed = self._meter.create_counter(
            name="notification.fanout.batches.failed.total",
            description="Fan-out batches abandoned after retries",
            unit="1",
        )

        self.fanout_retries = self._meter.create_counter(
            name="notification.fanout.retries.total", description="Fan-out batch retry attempts", unit="1"
        )

        self.fanout_duration = self._meter.create_histogram(
            name="notification.fanout.duration", description="Time to fan out one notification in seconds", unit="s"
        )

        # Listing
        self.self_heal_rows = self._meter.create_counter(
            name="notification.list.self_heal.rows.total",
            description="State rows materialized while listing",
            unit="1",
        )

        self.list_duration = self._meter.create_histogram(
            name="notification.list.duration", description="Time to build one notification page in seconds", unit="s"
        )

        # User engagement
        self.notifications_read = self._meter.create_counter(
            name="notifications.read.total", description="Total notifications read by users", unit="1"
        )

        # Reconciliation
        self.reconcile_rows_upserted = self._meter.create_counter(
            name="notification.reconcile.rows.upserted.total",
            description="State rows created by user lifecycle reconciliation",
            unit="1",
        )

        self.reconcile_rows_removed = self._meter.create_counter(
            name="notification.reconcile.rows.removed.total",
            description="State rows removed after a role change",
            unit="1",
        )

        self.orphans_pruned = self._meter.create_counter(
            name="notification.orphans.pruned.total", description="State rows deleted without a master", unit="1"
        )

    def record_notification_created(self, category: str, severity: str) -> None:
        self.notifications_created.add(1, attributes={"category": category, "severity": severity})

    def record_fanout(
        self, category: str, inserted: int, batches_flushed: int, batches_failed: int, duration_seconds: float
    ) -> None:
        self.fanout_rows_inserted.add(inserted, attributes={"category": category})
        self.fanout_batches_flushed.add(batches_flushed, attributes={"category": category})
        if batches_failed:
            self.fanout_batches_failed.add(batches_failed, attributes={"category": category})
        self.fanout_duration.record(duration_seconds, attributes={"category": category})

    def record_fanout_retry(self, attempt_number: int) -> None:
        self.fanout_retries.add(1, attributes={"attempt": str(attempt_number)})

    def record_list(self, returned: int, healed: int, duration_seconds: float) -> None:
        if healed:
            self.self_heal_rows.add(healed)
        self.list_duration.record(duration_seconds, attributes={"empty_page": str(returned == 0)})

    def record_notification_read(self, category: str) -> None:
        self.notifications_read.add(1, attributes={"category": category})

    def record_reconcile(self, trigger: str, upserted: int, removed: int = 0) -> None:
        self.reconcile_rows_upserted.add(upserted, attributes={"trigger": trigger})
        if removed:
            self.reconcile_rows_removed.add(removed, attributes={"trigger": trigger})

    def record_orphans_pruned(self, count: int) -> None:
        self.orphans_pruned.add(count)
