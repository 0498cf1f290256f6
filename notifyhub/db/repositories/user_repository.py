from collections.abc import AsyncIterator
from dataclasses import asdict
from datetime import datetime

from notifyhub.core.database_context import MongoDocument
from notifyhub.core.utils import as_utc, utc_now
from notifyhub.db.docs import UserDocument
from notifyhub.domain.enums.user import UserRole
from notifyhub.domain.user import AutoDeleteCandidate, User


class UserRepository:
    async def get_user(self, username: str) -> User | None:
        doc = await UserDocument.find_one({"username": username})
        return User(**doc.model_dump(include={"username", "role", "is_active"})) if doc else None

    async def create_user(self, user: User, created_at: datetime | None = None, auto_delete: bool = True) -> User:
        doc = UserDocument(**asdict(user), auto_delete=auto_delete)
        if created_at is not None:
            doc.created_at = created_at
        await doc.insert()
        return User(**doc.model_dump(include={"username", "role", "is_active"}))

    async def update_user(
        self, username: str, role: UserRole | None = None, is_active: bool | None = None
    ) -> User | None:
        doc = await UserDocument.find_one({"username": username})
        if not doc:
            return None

        update_dict = {k: v for k, v in {"role": role, "is_active": is_active}.items() if v is not None}
        if update_dict:
            update_dict["updated_at"] = utc_now()
            await doc.set(update_dict)
        return User(**doc.model_dump(include={"username", "role", "is_active"}))

    async def iter_active_usernames(self, predicate: MongoDocument) -> AsyncIterator[str]:
        """Stream usernames matching an audience predicate without loading the directory."""
        collection = UserDocument.get_motor_collection()
        async for raw in collection.find(predicate, {"username": 1, "_id": 0}):
            yield raw["username"]

    async def find_auto_delete_candidates(self, cutoff: datetime) -> list[AutoDeleteCandidate]:
        """Users flagged for auto-delete whose account is at least as old as the cutoff."""
        docs = await UserDocument.find({"auto_delete": True, "created_at": {"$lte": cutoff}}).to_list()
        return [
            AutoDeleteCandidate(
                username=doc.username,
                role=doc.role,
                is_active=doc.is_active,
                created_at=as_utc(doc.created_at),
                auto_delete=doc.auto_delete,
            )
            for doc in docs
        ]

    async def delete_users(self, usernames: list[str]) -> int:
        if not usernames:
            return 0
        result = await UserDocument.get_motor_collection().delete_many({"username": {"$in": usernames}})
        return result.deleted_count
