import logging

from notifyhub.core.metrics import RecycleMetrics
from notifyhub.db.repositories import RecordRepository
from notifyhub.domain.enums import BroadcastEvent, NotificationCategory
from notifyhub.domain.enums.user import RECYCLE_PRIVILEGED_ROLES
from notifyhub.domain.exceptions import ValidationError
from notifyhub.domain.notification.catalog import normalize_category
from notifyhub.domain.recycle import (
    InvalidCategoryError,
    NothingToRestoreError,
    PathEscapeError,
    PurgeRequest,
    RecoveryMaterial,
    RecoverySource,
    RecycleResult,
    RecyclePermissionError,
    RestoreFailedError,
    RestoreOutcome,
    RestoreRequest,
    is_safe_ref_id,
)
from notifyhub.domain.user import Principal
from notifyhub.services.broadcast import RedisBroadcaster
from notifyhub.services.notifications.audience import role_room
from notifyhub.services.recycle.snapshot_store import SnapshotStore


class RecycleBinService:
    """Restores or permanently deletes soft-deleted domain records.

    Recovery material is looked up in priority order: the record's ref_id,
    then an inline snapshot, then a snapshot file on disk. Only privileged
    roles get past the gate, and nothing is written before it.
    """

    def __init__(
        self,
        record_repository: RecordRepository,
        snapshot_store: SnapshotStore,
        broadcaster: RedisBroadcaster,
        metrics: RecycleMetrics,
        logger: logging.Logger,
    ) -> None:
        self.records = record_repository
        self.snapshots = snapshot_store
        self.broadcaster = broadcaster
        self.metrics = metrics
        self.logger = logger

    @staticmethod
    def resolve_category(value: str) -> NotificationCategory:
        category = normalize_category(value or "")
        if category is None:
            raise InvalidCategoryError(value)
        return category

    @staticmethod
    def audience_rooms() -> list[str]:
        return sorted(role_room(str(role)) for role in RECYCLE_PRIVILEGED_ROLES)

    @staticmethod
    def guard_ref_id(ref_id: object) -> None:
        if ref_id is not None and not is_safe_ref_id(str(ref_id)):
            raise PathEscapeError(str(ref_id))

    async def locate_material(self, category: NotificationCategory, request: RestoreRequest) -> RecoveryMaterial:
        if request.ref_id:
            self.guard_ref_id(request.ref_id)
            return RecoveryMaterial(source=RecoverySource.REF_ID, ref_id=request.ref_id)
        if request.snapshot:
            self.guard_ref_id(request.snapshot.get("ref_id"))
            return RecoveryMaterial(source=RecoverySource.INLINE_SNAPSHOT, snapshot=request.snapshot)
        if request.snapshot_path:
            stored = await self.snapshots.read_snapshot(category, locator=request.snapshot_path)
            if stored is not None:
                return RecoveryMaterial(source=RecoverySource.STORED_SNAPSHOT, snapshot=stored)
        raise NothingToRestoreError(str(category), request.ref_id or request.snapshot_path or "")

    def _check_role(self, principal: Principal, action: str) -> None:
        if principal.role not in RECYCLE_PRIVILEGED_ROLES:
            self.metrics.record_denied(action, str(principal.role))
            raise RecyclePermissionError(str(principal.role))

    async def restore(self, principal: Principal, request: RestoreRequest) -> RecycleResult:
        category = self.resolve_category(request.category)
        self._check_role(principal, "restore")
        material = await self.locate_material(category, request)

        source = material.source
        if material.source is RecoverySource.REF_ID and material.ref_id:
            outcome = await self.records.reinstate_by_ref(category, material.ref_id)
            if not outcome.ok:
                # Record is gone from the collection; fall back to its stored snapshot
                stored = await self.snapshots.read_snapshot(category, ref_id=material.ref_id)
                if stored is not None:
                    source = RecoverySource.STORED_SNAPSHOT
                    outcome = await self.records.reinstate_snapshot(category, stored, material.ref_id)
        elif material.snapshot is not None:
            outcome = await self.records.reinstate_snapshot(category, material.snapshot, request.ref_id)
        else:
            outcome = RestoreOutcome(ok=False, message="No recovery material")

        self.metrics.record_restore(str(category), str(source), outcome.ok)
        if not outcome.ok:
            self.logger.warning(
                "Restore failed",
                extra={"category": str(category), "source": str(source), "reason": outcome.message},
            )
            raise RestoreFailedError(outcome.message)

        result = RecycleResult(
            category=category,
            action="restored",
            source=source,
            ids=outcome.restored_ids,
            message=outcome.message,
            rooms=self.audience_rooms(),
        )
        await self._announce(BroadcastEvent.RECYCLEBIN_RESTORED, result, principal)
        return result

    async def purge(self, principal: Principal, request: PurgeRequest) -> RecycleResult:
        category = self.resolve_category(request.category)
        if not request.ref_id:
            raise ValidationError("Permanent delete requires a ref_id")
        self._check_role(principal, "purge")
        self.guard_ref_id(request.ref_id)
        # Resolving the folder rejects an escaping ref_id before anything is deleted
        self.snapshots.entity_dir(category, request.ref_id)

        outcome = await self.records.purge(category, request.ref_id)
        self.metrics.record_purge(str(category), outcome.ok)
        if not outcome.ok:
            self.logger.warning(
                "Permanent delete failed",
                extra={"category": str(category), "ref_id": request.ref_id, "reason": outcome.message},
            )
            raise RestoreFailedError(outcome.message)

        await self.snapshots.discard(category, request.ref_id)

        result = RecycleResult(
            category=category,
            action="deleted",
            source=None,
            ids=[request.ref_id],
            message=outcome.message,
            rooms=self.audience_rooms(),
        )
        await self._announce(BroadcastEvent.RECYCLEBIN_DELETED, result, principal)
        return result

    async def _announce(self, event: BroadcastEvent, result: RecycleResult, principal: Principal) -> None:
        payload = {
            "category": str(result.category),
            "action": result.action,
            "source": str(result.source) if result.source else None,
            "ids": result.ids,
            "description": result.message,
            "actor": principal.username,
        }
        await self.broadcaster.notify_rooms(result.rooms, event, payload)
        self.logger.info(
            f"Recycle bin {result.action}",
            extra={"category": str(result.category), "ids": result.ids, "actor": principal.username},
        )
