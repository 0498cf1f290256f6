"""Static notification catalog.

Title -> category mapping, title -> normalized action type rules, and the
per-category display defaults applied when a notification is created.
"""

from notifyhub.core.utils import dedupe_trim
from notifyhub.domain.enums.notification import (
    NotificationCategory,
    NotificationChannel,
    NotificationTitle,
    NotificationType,
)
from notifyhub.domain.notification.exceptions import NoCategoryMappingError

T = NotificationTitle
C = NotificationCategory

TITLE_CATEGORY_MAP: dict[str, NotificationCategory] = {
    # User
    T.NEW_USER: C.USER,
    T.UPDATE_USER: C.USER,
    T.DELETE_USER: C.USER,
    T.USER_ROLE_CHANGED: C.USER,
    T.USER_PASSWORD_RESET: C.USER,
    T.USER_SUSPENDED: C.USER,
    T.USER_REACTIVATED: C.USER,
    # Tenant
    T.NEW_TENANT: C.TENANT,
    T.UPDATE_TENANT: C.TENANT,
    T.DELETE_TENANT: C.TENANT,
    T.TENANT_VERIFIED: C.TENANT,
    T.TENANT_MOVED_OUT: C.TENANT,
    T.TENANT_COMPLAINT_FILED: C.TENANT,
    # Property
    T.NEW_PROPERTY: C.PROPERTY,
    T.UPDATE_PROPERTY: C.PROPERTY,
    T.DELETE_PROPERTY: C.PROPERTY,
    T.PROPERTY_APPROVED: C.PROPERTY,
    T.PROPERTY_LISTING_EXPIRED: C.PROPERTY,
    T.PROPERTY_MAINTENANCE_REQUESTED: C.PROPERTY,
    T.PROPERTY_MAINTENANCE_COMPLETED: C.PROPERTY,
    T.PROPERTY_INSPECTION_SCHEDULED: C.PROPERTY,
    # Lease
    T.NEW_LEASE: C.LEASE,
    T.UPDATE_LEASE: C.LEASE,
    T.DELETE_LEASE: C.LEASE,
    T.LEASE_RENEWED: C.LEASE,
    T.LEASE_TERMINATED: C.LEASE,
    T.LEASE_PAYMENT_RECEIVED: C.LEASE,
    T.LEASE_REMINDER_SENT: C.LEASE,
    T.LEASE_AGREEMENT_DOWNLOAD: C.LEASE,
    # Agent / Developer
    T.NEW_AGENT: C.AGENT,
    T.UPDATE_AGENT: C.AGENT,
    T.DELETE_AGENT: C.AGENT,
    T.AGENT_ASSIGNED_PROPERTY: C.AGENT,
    T.NEW_DEVELOPER: C.DEVELOPER,
    T.UPDATE_DEVELOPER: C.DEVELOPER,
    T.DELETE_DEVELOPER: C.DEVELOPER,
    # Maintenance
    T.NEW_MAINTENANCE_REQUEST: C.MAINTENANCE,
    T.UPDATE_MAINTENANCE_REQUEST: C.MAINTENANCE,
    T.CLOSE_MAINTENANCE_REQUEST: C.MAINTENANCE,
    T.ASSIGN_MAINTENANCE_TEAM: C.MAINTENANCE,
    T.MAINTENANCE_IN_PROGRESS: C.MAINTENANCE,
    T.MAINTENANCE_COMPLETED: C.MAINTENANCE,
    # Complaints
    T.NEW_COMPLAINT: C.COMPLAINT,
    T.UPDATE_COMPLAINT: C.COMPLAINT,
    T.CLOSE_COMPLAINT: C.COMPLAINT,
    T.COMPLAINT_ESCALATED: C.COMPLAINT,
    T.COMPLAINT_RESOLVED: C.COMPLAINT,
    # Team
    T.NEW_TEAM: C.TEAM,
    T.UPDATE_TEAM: C.TEAM,
    T.DELETE_TEAM: C.TEAM,
    T.ASSIGN_TEAM_MEMBER: C.TEAM,
    T.TEAM_TASK_CREATED: C.TEAM,
    T.TEAM_TASK_COMPLETED: C.TEAM,
    # Registration / KYC
    T.NEW_REGISTRATION: C.REGISTRATION,
    T.ACCOUNT_VERIFIED: C.REGISTRATION,
    T.KYC_DOCUMENT_UPLOADED: C.REGISTRATION,
    T.KYC_DOCUMENT_APPROVED: C.REGISTRATION,
    T.KYC_DOCUMENT_REJECTED: C.REGISTRATION,
    # Payment
    T.NEW_INVOICE: C.PAYMENT,
    T.UPDATE_INVOICE: C.PAYMENT,
    T.INVOICE_PAID: C.PAYMENT,
    T.INVOICE_OVERDUE: C.PAYMENT,
    T.REFUND_ISSUED: C.PAYMENT,
    T.PAYMENT_FAILED: C.PAYMENT,
    # System
    T.SYSTEM_UPDATE: C.SYSTEM,
    T.SECURITY_ALERT: C.SYSTEM,
    T.BACKUP_COMPLETED: C.SYSTEM,
    T.NEW_MESSAGE: C.SYSTEM,
    T.NEW_NOTIFICATION: C.SYSTEM,
    T.BROADCAST_ANNOUNCEMENT: C.SYSTEM,
    T.USERS_AUTO_DELETED: C.SYSTEM,
    T.USERS_AUTO_DELETE_DRY_RUN: C.SYSTEM,
    T.AUTO_DELETE_USERS_FAILED: C.SYSTEM,
}

# Checked in order; first match wins.
_PREFIX_RULES: list[tuple[str, NotificationType]] = [
    ("new ", NotificationType.CREATE),
    ("update ", NotificationType.UPDATE),
    ("delete ", NotificationType.DELETE),
]

_SUBSTRING_RULES: list[tuple[str, NotificationType]] = [
    ("approved", NotificationType.APPROVE),
    ("listing expired", NotificationType.EXPIRE),
    ("inspection", NotificationType.SCHEDULE),
    ("maintenance requested", NotificationType.MAINTENANCE_REQUEST),
    ("maintenance in progress", NotificationType.MAINTENANCE_IN_PROGRESS),
    ("maintenance completed", NotificationType.MAINTENANCE_COMPLETED),
    ("lease renewed", NotificationType.RENEW),
    ("lease terminated", NotificationType.TERMINATE),
    ("payment received", NotificationType.PAYMENT_RECEIVED),
    ("reminder sent", NotificationType.REMINDER),
    ("agreement download", NotificationType.DOWNLOAD),
    ("close complaint", NotificationType.MAINTENANCE_CLOSED),
    ("task created", NotificationType.CREATE),
    ("task completed", NotificationType.COMPLETE),
    ("invoice paid", NotificationType.PAYMENT_RECEIVED),
    ("invoice overdue", NotificationType.INVOICE_OVERDUE),
    ("refund issued", NotificationType.REFUND_ISSUED),
    ("payment failed", NotificationType.PAYMENT_FAILED),
    ("broadcast", NotificationType.BROADCAST),
    ("security alert", NotificationType.NOTIFY),
]

CATEGORY_ICON_MAP: dict[NotificationCategory, str] = {
    C.USER: "person",
    C.TENANT: "recent_actors",
    C.PROPERTY: "home",
    C.LEASE: "description",
    C.AGENT: "support_agent",
    C.DEVELOPER: "engineering",
    C.MAINTENANCE: "build",
    C.COMPLAINT: "report_problem",
    C.TEAM: "groups",
    C.REGISTRATION: "verified_user",
    C.PAYMENT: "payments",
    C.SYSTEM: "settings",
}

CATEGORY_DEFAULT_TAGS: dict[NotificationCategory, list[str]] = {
    C.USER: ["user", "account", "profile", "admin"],
    C.TENANT: ["tenant", "renter", "verification", "occupancy"],
    C.PROPERTY: ["property", "listing", "inspection", "maintenance"],
    C.LEASE: ["lease", "agreement", "renewal", "payment"],
    C.AGENT: ["agent", "assignment", "brokering", "staff"],
    C.DEVELOPER: ["developer", "project", "release", "deployment"],
    C.MAINTENANCE: ["maintenance", "workorder", "repair", "service"],
    C.COMPLAINT: ["complaint", "ticket", "issue", "escalation"],
    C.TEAM: ["team", "task", "collaboration", "member"],
    C.REGISTRATION: ["registration", "onboarding", "kyc", "verification"],
    C.PAYMENT: ["payment", "invoice", "billing", "refund"],
    C.SYSTEM: ["system", "security", "backup", "announce"],
}

DEFAULT_ICON = "notifications"
MAX_TAGS = 20
MAX_TAG_LENGTH = 40


def derive_category(title: str) -> NotificationCategory:
    try:
        return TITLE_CATEGORY_MAP[title]
    except KeyError:
        raise NoCategoryMappingError(title) from None


def derive_type(title: str) -> NotificationType:
    lowered = title.lower()
    for prefix, kind in _PREFIX_RULES:
        if lowered.startswith(prefix):
            return kind
    for needle, kind in _SUBSTRING_RULES:
        if needle in lowered:
            return kind
    return NotificationType.NOTIFY


def normalize_category(value: str) -> NotificationCategory | None:
    """Case-insensitive lookup against the category enumeration."""
    wanted = value.strip().lower()
    for category in NotificationCategory:
        if category.value.lower() == wanted:
            return category
    return None


def cap_tags(tags: list[str]) -> list[str]:
    return [tag[:MAX_TAG_LENGTH] for tag in dedupe_trim(tags)][:MAX_TAGS]


def default_icon(category: NotificationCategory) -> str:
    return CATEGORY_ICON_MAP.get(category, DEFAULT_ICON)


def default_tags(category: NotificationCategory) -> list[str]:
    return cap_tags(CATEGORY_DEFAULT_TAGS.get(category, []))


def sanitize_channels(channels: list[str] | None) -> list[NotificationChannel]:
    """Drop unknown channel names and duplicates; an empty result falls back to in-app."""
    known = {c.value: c for c in NotificationChannel}
    cleaned = [known[c] for c in dedupe_trim(channels) if c in known]
    return cleaned or [NotificationChannel.IN_APP]
