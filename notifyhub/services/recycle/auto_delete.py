import logging
from dataclasses import asdict
from datetime import datetime, timedelta

from pymongo.errors import PyMongoError

from notifyhub.core.metrics import RecycleMetrics
from notifyhub.core.utils import format_timestamp, utc_now
from notifyhub.db.repositories import UserNotificationRepository, UserRepository
from notifyhub.domain.enums import AudienceMode, NotificationChannel, NotificationSeverity, NotificationTitle, UserRole
from notifyhub.domain.notification import DomainNotificationCreate, NotificationAudience
from notifyhub.domain.recycle import AUTO_DELETE_FOLDER, AutoDeleteMode, AutoDeleteReport
from notifyhub.domain.user import AutoDeleteCandidate, Principal
from notifyhub.services.notifications.notification_service import NotificationService
from notifyhub.services.recycle.snapshot_store import SnapshotStore
from notifyhub.settings import Settings

BACKUP_FILENAME = "users.json"
AUTO_DELETE_SOURCE = "auto-delete-service"
AUTO_DELETE_TAGS = ["system", "auto-delete"]

SYSTEM_PRINCIPAL = Principal(username=AUTO_DELETE_SOURCE, role=UserRole.ADMIN)


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def dated_folder_name(moment: datetime) -> str:
    """Backup folder for a run, e.g. "1st of July 2025"."""
    return f"{moment.day}{ordinal_suffix(moment.day)} of {moment.strftime('%B')} {moment.year}"


def _describe(candidate: AutoDeleteCandidate) -> dict[str, object]:
    row = asdict(candidate)
    row["role"] = str(candidate.role)
    row["created_at"] = format_timestamp(candidate.created_at)
    return row


class AutoDeleteService:
    """Daily sweep of user accounts flagged for auto-delete.

    Every run backs up the matching users under the recycle-bin root and tells
    the configured roles what happened. Users are only removed when
    AUTO_DELETE_ENABLED is set; otherwise the run is a dry-run.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        state_repository: UserNotificationRepository,
        snapshot_store: SnapshotStore,
        notification_service: NotificationService,
        settings: Settings,
        metrics: RecycleMetrics,
        logger: logging.Logger,
    ) -> None:
        self.users = user_repository
        self.states = state_repository
        self.snapshots = snapshot_store
        self.notifications = notification_service
        self.enabled = settings.AUTO_DELETE_ENABLED
        self.age_days = settings.AUTO_DELETE_AGE_DAYS
        self.notify_roles = list(settings.AUTO_DELETE_NOTIFY_ROLES)
        self.metrics = metrics
        self.logger = logger

    async def run(self, now: datetime | None = None) -> AutoDeleteReport:
        executed_at = now or utc_now()
        folder = dated_folder_name(executed_at)
        report = AutoDeleteReport(
            run_mode=AutoDeleteMode.DRY_RUN,
            cutoff=executed_at - timedelta(days=self.age_days),
            executed_at=executed_at,
            recycle_folder=f"{AUTO_DELETE_FOLDER}/{folder}",
        )

        try:
            report.users = await self.users.find_auto_delete_candidates(report.cutoff)
            if report.users:
                backup = await self.snapshots.write_backup(
                    report.recycle_folder, BACKUP_FILENAME, [_describe(u) for u in report.users]
                )
                report.backup_path = str(backup)
                if self.enabled:
                    report.run_mode = AutoDeleteMode.DELETE
                    report.deleted_count = await self._delete(report.users)
        except (PyMongoError, OSError) as e:
            report.error = str(e)
            self.logger.error(f"Auto-delete run failed: {e}", exc_info=True)

        self.metrics.record_auto_delete(str(report.run_mode), len(report.users), report.error is None)
        self.logger.info(
            "Auto-delete run finished",
            extra={
                "run_mode": str(report.run_mode),
                "matched": len(report.users),
                "deleted": report.deleted_count,
                "cutoff": format_timestamp(report.cutoff),
            },
        )
        await self.notify(report)
        return report

    async def _delete(self, candidates: list[AutoDeleteCandidate]) -> int:
        usernames = [c.username for c in candidates]
        deleted = await self.users.delete_users(usernames)
        for username in usernames:
            await self.states.delete_for_user(username)
        return deleted

    async def notify(self, report: AutoDeleteReport) -> None:
        if report.error:
            title = NotificationTitle.AUTO_DELETE_USERS_FAILED
            body = "Auto delete process failed. Check server logs."
        elif report.run_mode is AutoDeleteMode.DELETE:
            title = NotificationTitle.USERS_AUTO_DELETED
            body = f"Deleted {report.deleted_count} user(s)."
        else:
            title = NotificationTitle.USERS_AUTO_DELETE_DRY_RUN
            body = f"Dry-run: would delete {len(report.users)} user(s)."

        create = DomainNotificationCreate(
            title=str(title),
            body=body,
            audience=NotificationAudience(mode=AudienceMode.ROLE, roles=self.notify_roles),
            severity=NotificationSeverity.ERROR if report.error else NotificationSeverity.INFO,
            channels=[str(NotificationChannel.IN_APP)],
            metadata={
                "run_mode": str(report.run_mode),
                "cutoff": format_timestamp(report.cutoff),
                "deleted_count": report.deleted_count,
                "users": [_describe(u) for u in report.users],
                "backup_path": report.backup_path,
                "recycle_folder": report.recycle_folder,
                "executed_at": format_timestamp(report.executed_at),
                "error": report.error,
            },
            tags=list(AUTO_DELETE_TAGS),
            source=AUTO_DELETE_SOURCE,
        )
        await self.notifications.create_notification(SYSTEM_PRINCIPAL, create)
