import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any

from notifyhub.domain.enums import NotificationCategory
from notifyhub.domain.recycle import CATEGORY_FOLDER_MAP, PathEscapeError

SNAPSHOT_FILENAME = "data.json"


class SnapshotStore:
    """Access to recycle-bin snapshots on disk.

    Layout: <root>/<category folder>/<ref_id>/data.json. Every locator is
    resolved against the root and rejected if it lands outside of it. Record
    snapshots are only ever read or discarded here; the one thing written is
    the JSON backup taken before a bulk job deletes records.
    """

    def __init__(self, root: str | Path, logger: logging.Logger) -> None:
        self.root = Path(root).resolve()
        self.logger = logger

    def _inside_root(self, candidate: Path) -> Path:
        resolved = candidate.resolve()
        if resolved != self.root and not resolved.is_relative_to(self.root):
            raise PathEscapeError(str(resolved))
        return resolved

    def entity_dir(self, category: NotificationCategory, ref_id: str) -> Path:
        folder = CATEGORY_FOLDER_MAP.get(category, str(category).lower())
        return self._inside_root(self.root / folder / ref_id)

    def resolve_locator(self, locator: str) -> Path:
        """Map a snapshot_path (relative to the root) onto its data.json file."""
        path = self._inside_root(self.root / locator.lstrip("/"))
        if path.suffix != ".json":
            path = path / SNAPSHOT_FILENAME
        return path

    async def read_snapshot(
        self,
        category: NotificationCategory,
        ref_id: str | None = None,
        locator: str | None = None,
    ) -> dict[str, Any] | None:
        """Return the parsed snapshot, or None when it is missing or unreadable."""
        if locator:
            path = self.resolve_locator(locator)
        elif ref_id:
            path = self.entity_dir(category, ref_id) / SNAPSHOT_FILENAME
        else:
            return None

        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
            data = json.loads(raw)
        except (OSError, ValueError) as e:
            self.logger.debug("Snapshot unavailable", extra={"path": str(path), "error": str(e)})
            return None

        if not isinstance(data, dict):
            self.logger.debug("Snapshot is not a JSON object", extra={"path": str(path)})
            return None
        return data

    async def discard(self, category: NotificationCategory, ref_id: str) -> bool:
        """Remove a record's snapshot folder; returns False when there was none."""
        target = self.entity_dir(category, ref_id)
        if target == self.root or not target.is_dir():
            return False
        await asyncio.to_thread(shutil.rmtree, target)
        return True

    async def write_backup(self, folder: str, name: str, payload: Any) -> Path:
        """Write `payload` as JSON to <root>/<folder>/<name>, replacing any earlier backup."""
        path = self._inside_root(self.root / folder / name)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")

        await asyncio.to_thread(_write)
        self.logger.debug("Backup written", extra={"path": str(path)})
        return path
