from typing import Any

from notifyhub.core.database_context import Collection, Database, MongoDocument
from notifyhub.core.utils import utc_now
from notifyhub.domain.enums import NotificationCategory
from notifyhub.domain.recycle import CATEGORY_FOLDER_MAP, PurgeOutcome, RestoreOutcome, is_safe_ref_id


class RecordRepository:
    """Soft-deletable domain records, one collection per notification category.

    Records are addressed by `ref_id`; a record is in the recycle bin while it
    carries a non-null `deleted_at`.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def _collection(self, category: NotificationCategory) -> Collection:
        return self._db[CATEGORY_FOLDER_MAP[category]]

    async def soft_delete(self, category: NotificationCategory, ref_id: str) -> bool:
        result = await self._collection(category).update_one(
            {"ref_id": ref_id, "deleted_at": None},
            {"$set": {"deleted_at": utc_now()}},
        )
        return result.modified_count > 0

    async def get_record(self, category: NotificationCategory, ref_id: str) -> MongoDocument | None:
        return await self._collection(category).find_one({"ref_id": ref_id}, {"_id": 0})

    async def reinstate_by_ref(self, category: NotificationCategory, ref_id: str) -> RestoreOutcome:
        result = await self._collection(category).update_one(
            {"ref_id": ref_id, "deleted_at": {"$ne": None}},
            {"$set": {"deleted_at": None}},
        )
        if not result.matched_count:
            return RestoreOutcome(ok=False, message=f"No deleted {category} record with ref_id '{ref_id}'")
        return RestoreOutcome(ok=True, restored_ids=[ref_id], message=f"{category} '{ref_id}' restored")

    async def reinstate_snapshot(
        self, category: NotificationCategory, snapshot: dict[str, Any], ref_id: str | None = None
    ) -> RestoreOutcome:
        record_id = snapshot.get("ref_id") or ref_id
        if not record_id:
            return RestoreOutcome(ok=False, message="Snapshot carries no ref_id")
        if not is_safe_ref_id(str(record_id)):
            return RestoreOutcome(ok=False, message=f"Snapshot ref_id '{record_id}' is not a valid identifier")

        document = {k: v for k, v in snapshot.items() if k != "_id"}
        document["ref_id"] = str(record_id)
        document["deleted_at"] = None
        await self._collection(category).replace_one({"ref_id": document["ref_id"]}, document, upsert=True)
        return RestoreOutcome(
            ok=True,
            restored_ids=[document["ref_id"]],
            message=f"{category} '{document['ref_id']}' restored from snapshot",
        )

    async def purge(self, category: NotificationCategory, ref_id: str) -> PurgeOutcome:
        result = await self._collection(category).delete_one({"ref_id": ref_id})
        if not result.deleted_count:
            return PurgeOutcome(ok=False, message=f"No {category} record with ref_id '{ref_id}'")
        return PurgeOutcome(ok=True, message=f"{category} '{ref_id}' permanently deleted")
