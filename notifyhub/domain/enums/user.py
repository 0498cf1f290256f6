from notifyhub.core.utils import StringEnum


class UserRole(StringEnum):
    """User roles in the system."""

    ADMIN = "admin"
    AGENT = "agent"
    TENANT = "tenant"
    OWNER = "owner"
    OPERATOR = "operator"
    MANAGER = "manager"
    DEVELOPER = "developer"
    GENERAL = "general"


# Roles allowed to author notifications
NOTIFICATION_CREATOR_ROLES = frozenset({UserRole.ADMIN, UserRole.OPERATOR, UserRole.MANAGER})

# Roles allowed to restore or permanently delete recycle-bin records
RECYCLE_PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.OPERATOR, UserRole.MANAGER})

# Roles that see every notification master regardless of audience
PRIVILEGED_VIEWER_ROLES = frozenset({UserRole.ADMIN})
