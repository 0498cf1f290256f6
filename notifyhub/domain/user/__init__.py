from dataclasses import dataclass
from datetime import datetime

from notifyhub.domain.enums.user import UserRole


@dataclass
class User:
    """Directory view of a user: just what audience matching needs."""

    username: str
    role: UserRole
    is_active: bool = True


@dataclass
class Principal:
    """Caller identity as resolved by the upstream gateway."""

    username: str
    role: UserRole


@dataclass
class AutoDeleteCandidate:
    username: str
    role: UserRole
    is_active: bool
    created_at: datetime
    auto_delete: bool = True


__all__ = ["AutoDeleteCandidate", "Principal", "User"]
