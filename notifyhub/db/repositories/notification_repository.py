from collections.abc import AsyncIterator
from dataclasses import asdict
from typing import Any

from pymongo import DESCENDING

from notifyhub.core.database_context import MongoDocument
from notifyhub.core.utils import utc_now
from notifyhub.db.docs import AudienceDoc, NotificationMasterDocument, TargetDoc
from notifyhub.domain.notification import (
    DomainNotificationMaster,
    NotificationAudience,
    NotificationTarget,
)


def _to_domain(doc: NotificationMasterDocument) -> DomainNotificationMaster:
    data = doc.model_dump(exclude={"id", "revision_id", "audience", "target"})
    return DomainNotificationMaster(
        **data,
        audience=NotificationAudience(**doc.audience.model_dump()),
        target=NotificationTarget(**doc.target.model_dump()),
    )


class NotificationRepository:
    """Notification masters: shared, author-created content."""

    async def create_notification(self, master: DomainNotificationMaster) -> DomainNotificationMaster:
        data = asdict(master)
        doc = NotificationMasterDocument(
            **{k: v for k, v in data.items() if k not in ("audience", "target")},
            audience=AudienceDoc(**data["audience"]),
            target=TargetDoc(**data["target"]),
        )
        await doc.insert()
        return _to_domain(doc)

    async def get_notification(self, notification_id: str) -> DomainNotificationMaster | None:
        doc = await NotificationMasterDocument.find_one({"notification_id": notification_id})
        return _to_domain(doc) if doc else None

    async def update_notification(
        self, notification_id: str, update_fields: dict[str, Any]
    ) -> DomainNotificationMaster | None:
        doc = await NotificationMasterDocument.find_one({"notification_id": notification_id})
        if not doc:
            return None
        if update_fields:
            await doc.set(update_fields)
        return _to_domain(doc)

    async def delete_notification(self, notification_id: str) -> bool:
        """Hard removal, used only by maintenance tooling and tests; state rows become orphans."""
        doc = await NotificationMasterDocument.find_one({"notification_id": notification_id})
        if not doc:
            return False
        await doc.delete()
        return True

    async def find_notifications(self, query: MongoDocument, offset: int, limit: int) -> list[DomainNotificationMaster]:
        docs = (
            await NotificationMasterDocument.find(query)
            .sort([("created_at", DESCENDING)])
            .skip(offset)
            .limit(limit)
            .to_list()
        )
        return [_to_domain(d) for d in docs]

    async def count_notifications(self, query: MongoDocument) -> int:
        return await NotificationMasterDocument.find(query).count()

    async def iter_notification_ids(self, query: MongoDocument) -> AsyncIterator[str]:
        collection = NotificationMasterDocument.get_motor_collection()
        async for raw in collection.find(query, {"notification_id": 1, "_id": 0}):
            yield raw["notification_id"]

    @staticmethod
    def not_expired_clause() -> MongoDocument:
        return {"$or": [{"expires_at": None}, {"expires_at": {"$gt": utc_now()}}]}
