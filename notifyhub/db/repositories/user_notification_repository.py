from collections.abc import Iterable

from pymongo import UpdateOne
from pymongo.errors import BulkWriteError, DuplicateKeyError

from notifyhub.core.database_context import Collection, MongoDocument
from notifyhub.core.utils import utc_now
from notifyhub.db.docs import NotificationMasterDocument, UserNotificationStateDocument
from notifyhub.domain.notification import DomainUserNotificationState

DUPLICATE_KEY_CODE = 11000
DELETE_CHUNK_SIZE = 1000


def _state_from_raw(raw: MongoDocument) -> DomainUserNotificationState:
    return DomainUserNotificationState(
        username=raw["username"],
        notification_id=raw["notification_id"],
        is_read=raw.get("is_read", False),
        is_archived=raw.get("is_archived", False),
        delivered_at=raw.get("delivered_at"),
        read_at=raw.get("read_at"),
    )


class UserNotificationRepository:
    """Per-(username, notification_id) delivery state.

    Every write that may create a row is an upsert whose insert-only fields go
    through $setOnInsert; the unique (username, notification_id) index makes
    concurrent creators converge on one row.
    """

    @property
    def collection(self) -> Collection:
        return UserNotificationStateDocument.get_motor_collection()

    @staticmethod
    def build_upsert(username: str, notification_id: str) -> UpdateOne:
        return UpdateOne(
            {"username": username, "notification_id": notification_id},
            {
                "$setOnInsert": {
                    "username": username,
                    "notification_id": notification_id,
                    "is_read": False,
                    "is_archived": False,
                    "delivered_at": utc_now(),
                    "read_at": None,
                }
            },
            upsert=True,
        )

    async def bulk_upsert(self, operations: list[UpdateOne]) -> int:
        """Unordered bulk write; returns how many rows were newly created.

        Duplicate-key write errors mean a concurrent writer created the row first,
        which is the outcome we wanted. Any other write error is re-raised.
        """
        if not operations:
            return 0
        try:
            result = await self.collection.bulk_write(operations, ordered=False)
        except BulkWriteError as e:
            errors = e.details.get("writeErrors", [])
            if any(err.get("code") != DUPLICATE_KEY_CODE for err in errors):
                raise
            return int(e.details.get("nUpserted", 0))
        return result.upserted_count

    async def ensure_states(self, username: str, notification_ids: Iterable[str]) -> int:
        ops = [self.build_upsert(username, nid) for nid in dict.fromkeys(notification_ids)]
        return await self.bulk_upsert(ops)

    async def find_states(
        self, username: str, notification_ids: list[str], only_unread: bool = False
    ) -> list[DomainUserNotificationState]:
        query: MongoDocument = {"username": username, "notification_id": {"$in": notification_ids}}
        if only_unread:
            query["is_read"] = False
        return [_state_from_raw(raw) async for raw in self.collection.find(query)]

    async def get_state(self, username: str, notification_id: str) -> DomainUserNotificationState | None:
        raw = await self.collection.find_one({"username": username, "notification_id": notification_id})
        return _state_from_raw(raw) if raw else None

    async def count_states(self, username: str) -> int:
        return await self.collection.count_documents({"username": username})

    async def list_notification_ids(self, username: str) -> set[str]:
        cursor = self.collection.find({"username": username}, {"notification_id": 1, "_id": 0})
        return {raw["notification_id"] async for raw in cursor}

    async def mark_read(self, username: str, notification_id: str) -> bool:
        """Idempotent read transition; returns True only for the call that flipped the flag."""
        now = utc_now()
        result = await self.collection.update_one(
            {"username": username, "notification_id": notification_id, "is_read": False},
            {"$set": {"is_read": True, "read_at": now}},
        )
        if result.modified_count:
            return True

        # Row may not exist yet (never listed, never fanned out): create it already read.
        try:
            upsert = await self.collection.update_one(
                {"username": username, "notification_id": notification_id},
                {
                    "$setOnInsert": {
                        "username": username,
                        "notification_id": notification_id,
                        "is_read": True,
                        "is_archived": False,
                        "delivered_at": now,
                        "read_at": now,
                    }
                },
                upsert=True,
            )
        except DuplicateKeyError:
            return False
        return upsert.upserted_id is not None

    async def mark_all_read(self, username: str) -> int:
        result = await self.collection.update_many(
            {"username": username, "is_read": False},
            {"$set": {"is_read": True, "read_at": utc_now()}},
        )
        return result.modified_count

    async def archive(self, username: str, notification_id: str) -> bool:
        result = await self.collection.update_one(
            {"username": username, "notification_id": notification_id, "is_archived": False},
            {"$set": {"is_archived": True}},
        )
        return result.modified_count > 0

    async def archive_all(self, username: str) -> int:
        result = await self.collection.update_many(
            {"username": username, "is_archived": False},
            {"$set": {"is_archived": True}},
        )
        return result.modified_count

    async def count_read(self, username: str, notification_ids: list[str]) -> int:
        return await self.collection.count_documents(
            {"username": username, "notification_id": {"$in": notification_ids}, "is_read": True}
        )

    async def delete_for_user(self, username: str, notification_ids: Iterable[str] | None = None) -> int:
        if notification_ids is None:
            result = await self.collection.delete_many({"username": username})
            return result.deleted_count

        ids = list(notification_ids)
        deleted = 0
        for start in range(0, len(ids), DELETE_CHUNK_SIZE):
            chunk = ids[start:start + DELETE_CHUNK_SIZE]
            result = await self.collection.delete_many({"username": username, "notification_id": {"$in": chunk}})
            deleted += result.deleted_count
        return deleted

    async def delete_orphans(self) -> int:
        """Delete state rows whose master no longer exists."""
        pipeline: list[MongoDocument] = [
            {
                "$lookup": {
                    "from": NotificationMasterDocument.get_motor_collection().name,
                    "localField": "notification_id",
                    "foreignField": "notification_id",
                    "as": "master",
                }
            },
            {"$match": {"master": {"$size": 0}}},
            {"$project": {"_id": 1}},
        ]
        orphan_ids = [raw["_id"] async for raw in self.collection.aggregate(pipeline)]

        deleted = 0
        for start in range(0, len(orphan_ids), DELETE_CHUNK_SIZE):
            chunk = orphan_ids[start:start + DELETE_CHUNK_SIZE]
            result = await self.collection.delete_many({"_id": {"$in": chunk}})
            deleted += result.deleted_count
        return deleted
