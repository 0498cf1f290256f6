"""Audience resolution.

Turns an audience spec into the two things the rest of the engine needs: a
predicate over the user directory (who gets a state row) and the set of
broadcast rooms (who hears about it live). Also builds the reverse query, the
masters a given user is allowed to see.
"""

from notifyhub.core.database_context import MongoDocument
from notifyhub.core.utils import dedupe_trim
from notifyhub.domain.enums import AudienceMode, UserRole
from notifyhub.domain.enums.user import PRIVILEGED_VIEWER_ROLES
from notifyhub.domain.notification import InvalidAudienceError, NotificationAudience

BROADCAST_ROOM = "broadcast"


def user_room(username: str) -> str:
    return f"user:{username}"


def role_room(role: str) -> str:
    return f"role:{role}"


def normalize_audience(audience: NotificationAudience | None) -> NotificationAudience:
    """Trim and de-duplicate the audience collections and reject empty targets."""
    if audience is None or audience.mode is None:
        raise InvalidAudienceError("Audience mode is required")

    match audience.mode:
        case AudienceMode.BROADCAST:
            return NotificationAudience(mode=AudienceMode.BROADCAST)
        case AudienceMode.USER:
            usernames = dedupe_trim(audience.usernames)
            if not usernames:
                raise InvalidAudienceError("User audience requires at least one username")
            return NotificationAudience(mode=AudienceMode.USER, usernames=usernames)
        case AudienceMode.ROLE:
            roles = dedupe_trim(audience.roles)
            if not roles:
                raise InvalidAudienceError("Role audience requires at least one role")
            return NotificationAudience(mode=AudienceMode.ROLE, roles=roles)
        case _:
            raise InvalidAudienceError(f"Unknown audience mode '{audience.mode}'")


def rooms_for(audience: NotificationAudience) -> set[str]:
    match audience.mode:
        case AudienceMode.BROADCAST:
            return {BROADCAST_ROOM}
        case AudienceMode.USER:
            return {user_room(u) for u in audience.usernames}
        case AudienceMode.ROLE:
            return {role_room(r) for r in audience.roles}
        case _:
            return set()


def selection_predicate_for(audience: NotificationAudience) -> MongoDocument:
    """Query over the user directory selecting the active members of an audience."""
    audience = normalize_audience(audience)
    match audience.mode:
        case AudienceMode.USER:
            return {"is_active": True, "username": {"$in": audience.usernames}}
        case AudienceMode.ROLE:
            return {"is_active": True, "role": {"$in": audience.roles}}
        case _:
            return {"is_active": True}


def visibility_filter(username: str, role: UserRole | str) -> MongoDocument:
    """Query over notification masters selecting those visible to one user."""
    if role in PRIVILEGED_VIEWER_ROLES:
        return {}
    return {
        "$or": [
            {"audience.mode": AudienceMode.BROADCAST.value},
            {"audience.mode": AudienceMode.USER.value, "audience.usernames": username},
            {"audience.mode": AudienceMode.ROLE.value, "audience.roles": str(role)},
        ]
    }


def can_view(audience: NotificationAudience, username: str, role: UserRole | str) -> bool:
    """In-memory counterpart of visibility_filter for a single master."""
    if role in PRIVILEGED_VIEWER_ROLES:
        return True
    match audience.mode:
        case AudienceMode.BROADCAST:
            return True
        case AudienceMode.USER:
            return username in audience.usernames
        case AudienceMode.ROLE:
            return str(role) in audience.roles
        case _:
            return False
