from datetime import datetime

from beanie import Document, Indexed
from pydantic import ConfigDict, Field
from pymongo import ASCENDING, IndexModel

from notifyhub.core.utils import utc_now
from notifyhub.domain.enums import UserRole


class UserDocument(Document):
    """Directory entry consulted for audience matching."""

    username: Indexed(str, unique=True)  # type: ignore[valid-type]
    role: UserRole = UserRole.GENERAL
    is_active: bool = True
    auto_delete: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(from_attributes=True)

    class Settings:
        name = "users"
        use_state_management = True
        indexes = [
            IndexModel([("is_active", ASCENDING), ("role", ASCENDING)], name="idx_user_active_role"),
            IndexModel([("auto_delete", ASCENDING), ("created_at", ASCENDING)], name="idx_user_auto_delete"),
        ]
