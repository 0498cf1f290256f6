from notifyhub.core.metrics.base import BaseMetrics


class SyncMetrics(BaseMetrics):
    """Metrics for the change-stream live sync."""

    def _create_instruments(self) -> None:
        self.events_received = self._meter.create_counter(
            name="sync.events.received.total", description="Change events read from the feed", unit="1"
        )

        self.events_dropped = self._meter.create_counter(
            name="sync.events.dropped.total", description="Change events dropped on a full queue", unit="1"
        )

        self.handler_errors = self._meter.create_counter(
            name="sync.handler.errors.total", description="Change events whose handler raised", unit="1"
        )

        self.reconnects = self._meter.create_counter(
            name="sync.watch.reconnects.total", description="Change stream reconnect attempts", unit="1"
        )

        self.queue_depth = self._meter.create_up_down_counter(
            name="sync.queue.depth", description="Change events waiting for dispatch", unit="1"
        )

    def record_event_received(self, entity: str, kind: str) -> None:
        self.events_received.add(1, attributes={"entity": entity, "kind": kind})
        self.queue_depth.add(1)

    def record_event_dispatched(self) -> None:
        self.queue_depth.add(-1)

    def record_event_dropped(self, entity: str) -> None:
        self.events_dropped.add(1, attributes={"entity": entity})

    def record_handler_error(self, entity: str, error_type: str) -> None:
        self.handler_errors.add(1, attributes={"entity": entity, "error_type": error_type})

    def record_reconnect(self, stream: str) -> None:
        self.reconnects.add(1, attributes={"stream": stream})
