import logging

from notifyhub.core.metrics import NotificationMetrics
from notifyhub.db.repositories import NotificationRepository, UserNotificationRepository, UserRepository
from notifyhub.domain.enums import BroadcastEvent, UserRole
from notifyhub.domain.exceptions import NotFoundError
from notifyhub.domain.notification import (
    DomainNotificationMaster,
    FanOutResult,
    NotificationNotFoundError,
    ReconcileResult,
)
from notifyhub.domain.user import User
from notifyhub.schemas_pydantic.notification import NotificationMasterResponse
from notifyhub.services.broadcast import RedisBroadcaster
from notifyhub.services.notifications.audience import rooms_for, visibility_filter
from notifyhub.services.notifications.fanout import FanOutEngine


class ReconciliationCoordinator:
    """Keeps per-user state rows in line with masters, users and roles.

    Every handler is idempotent, so it is safe to invoke the same handler from
    the request path and again from the live change feed.
    """

    def __init__(
        self,
        fanout: FanOutEngine,
        notification_repository: NotificationRepository,
        state_repository: UserNotificationRepository,
        user_repository: UserRepository,
        broadcaster: RedisBroadcaster,
        metrics: NotificationMetrics,
        logger: logging.Logger,
    ) -> None:
        self.fanout = fanout
        self.notifications = notification_repository
        self.states = state_repository
        self.users = user_repository
        self.broadcaster = broadcaster
        self.metrics = metrics
        self.logger = logger

    async def on_master_created(self, master: DomainNotificationMaster, broadcast: bool = True) -> FanOutResult:
        result = await self.fanout.deliver(master)
        if broadcast:
            payload = NotificationMasterResponse.from_domain(master).model_dump(mode="json")
            await self.broadcaster.notify_rooms(rooms_for(master.audience), BroadcastEvent.NOTIFICATION_NEW, payload)
        return result

    async def on_user_activated(self, user: User) -> ReconcileResult:
        visible = await self._visible_ids(user.username, user.role, include_expired=False)
        upserted = await self.states.ensure_states(user.username, visible)
        self.metrics.record_reconcile("user_activated", upserted)
        self.logger.info(
            "Reconciled activated user",
            extra={"username": user.username, "visible": len(visible), "upserted": upserted},
        )
        return ReconcileResult(username=user.username, upserted=upserted)

    async def on_user_role_changed(self, user: User, new_role: UserRole | str, remove_stale: bool) -> ReconcileResult:
        visible = await self._visible_ids(user.username, new_role, include_expired=False)
        upserted = await self.states.ensure_states(user.username, visible)

        removed = 0
        if remove_stale:
            # Expired masters still in scope keep their rows; only out-of-scope rows go
            in_scope = set(await self._visible_ids(user.username, new_role, include_expired=True))
            held = await self.states.list_notification_ids(user.username)
            stale = held - in_scope
            if stale:
                removed = await self.states.delete_for_user(user.username, stale)

        self.metrics.record_reconcile("role_changed", upserted, removed)
        self.logger.info(
            "Reconciled role change",
            extra={
                "username": user.username,
                "old_role": str(user.role),
                "new_role": str(new_role),
                "upserted": upserted,
                "removed": removed,
            },
        )
        return ReconcileResult(username=user.username, upserted=upserted, removed=removed)

    async def on_user_deactivated(self, user: User) -> int:
        archived = await self.states.archive_all(user.username)
        self.logger.info("Archived state of deactivated user", extra={"username": user.username, "rows": archived})
        return archived

    async def prune_orphans(self) -> int:
        deleted = await self.states.delete_orphans()
        self.metrics.record_orphans_pruned(deleted)
        self.logger.info("Pruned orphaned notification state", extra={"deleted": deleted})
        return deleted

    async def backfill_for_notification(self, notification_id: str) -> FanOutResult:
        master = await self.notifications.get_notification(notification_id)
        if master is None:
            raise NotificationNotFoundError(notification_id)
        return await self.fanout.deliver(master)

    async def require_user(self, username: str) -> User:
        user = await self.users.get_user(username)
        if user is None:
            raise NotFoundError("User", username)
        return user

    async def change_user_role(self, username: str, new_role: UserRole, remove_stale: bool) -> ReconcileResult:
        """Update the directory entry, then reconcile the user's rows against the new role."""
        user = await self.require_user(username)
        await self.users.update_user(username, role=new_role)
        return await self.on_user_role_changed(user, new_role, remove_stale)

    async def set_user_active(self, username: str, is_active: bool) -> ReconcileResult:
        user = await self.require_user(username)
        await self.users.update_user(username, is_active=is_active)
        if is_active:
            return await self.on_user_activated(user)
        archived = await self.on_user_deactivated(user)
        return ReconcileResult(username=username, archived=archived)

    async def _visible_ids(self, username: str, role: UserRole | str, include_expired: bool) -> list[str]:
        clauses = [visibility_filter(username, role)]
        if not include_expired:
            clauses.append(NotificationRepository.not_expired_clause())
        query = {"$and": [c for c in clauses if c]} if any(clauses) else {}
        return [nid async for nid in self.notifications.iter_notification_ids(query)]
