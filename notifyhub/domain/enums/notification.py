from notifyhub.core.utils import StringEnum


class NotificationTitle(StringEnum):
    """Fixed set of notification titles shared with clients and producers."""

    # User management
    NEW_USER = "New User"
    UPDATE_USER = "Update User"
    DELETE_USER = "Delete User"
    USER_ROLE_CHANGED = "User Role Changed"
    USER_PASSWORD_RESET = "User Password Reset"
    USER_SUSPENDED = "User Suspended"
    USER_REACTIVATED = "User Reactivated"

    # Tenant management
    NEW_TENANT = "New Tenant"
    UPDATE_TENANT = "Update Tenant"
    DELETE_TENANT = "Delete Tenant"
    TENANT_VERIFIED = "Tenant Verified"
    TENANT_MOVED_OUT = "Tenant Moved Out"
    TENANT_COMPLAINT_FILED = "Tenant Complaint Filed"

    # Property management
    NEW_PROPERTY = "New Property"
    UPDATE_PROPERTY = "Update Property"
    DELETE_PROPERTY = "Delete Property"
    PROPERTY_APPROVED = "Property Approved"
    PROPERTY_LISTING_EXPIRED = "Property Listing Expired"
    PROPERTY_MAINTENANCE_REQUESTED = "Property Maintenance Requested"
    PROPERTY_MAINTENANCE_COMPLETED = "Property Maintenance Completed"
    PROPERTY_INSPECTION_SCHEDULED = "Property Inspection Scheduled"

    # Lease / agreement
    NEW_LEASE = "New Lease"
    UPDATE_LEASE = "Update Lease"
    DELETE_LEASE = "Delete Lease"
    LEASE_RENEWED = "Lease Renewed"
    LEASE_TERMINATED = "Lease Terminated"
    LEASE_PAYMENT_RECEIVED = "Lease Payment Received"
    LEASE_REMINDER_SENT = "Lease Reminder Sent"
    LEASE_AGREEMENT_DOWNLOAD = "Lease Agreement Download"

    # Agent / developer
    NEW_AGENT = "New Agent"
    UPDATE_AGENT = "Update Agent"
    DELETE_AGENT = "Delete Agent"
    AGENT_ASSIGNED_PROPERTY = "Agent Assigned Property"
    NEW_DEVELOPER = "New Developer"
    UPDATE_DEVELOPER = "Update Developer"
    DELETE_DEVELOPER = "Delete Developer"

    # Maintenance
    NEW_MAINTENANCE_REQUEST = "New Maintenance Request"
    UPDATE_MAINTENANCE_REQUEST = "Update Maintenance Request"
    CLOSE_MAINTENANCE_REQUEST = "Close Maintenance Request"
    ASSIGN_MAINTENANCE_TEAM = "Assign Maintenance Team"
    MAINTENANCE_IN_PROGRESS = "Maintenance In Progress"
    MAINTENANCE_COMPLETED = "Maintenance Completed"

    # Complaints
    NEW_COMPLAINT = "New Complaint"
    UPDATE_COMPLAINT = "Update Complaint"
    CLOSE_COMPLAINT = "Close Complaint"
    COMPLAINT_ESCALATED = "Complaint Escalated"
    COMPLAINT_RESOLVED = "Complaint Resolved"

    # Team / staff
    NEW_TEAM = "New Team"
    UPDATE_TEAM = "Update Team"
    DELETE_TEAM = "Delete Team"
    ASSIGN_TEAM_MEMBER = "Assign Team Member"
    TEAM_TASK_CREATED = "Team Task Created"
    TEAM_TASK_COMPLETED = "Team Task Completed"

    # Registration / verification
    NEW_REGISTRATION = "New Registration"
    ACCOUNT_VERIFIED = "Account Verified"
    KYC_DOCUMENT_UPLOADED = "KYC Document Uploaded"
    KYC_DOCUMENT_APPROVED = "KYC Document Approved"
    KYC_DOCUMENT_REJECTED = "KYC Document Rejected"

    # Payments & billing
    NEW_INVOICE = "New Invoice"
    UPDATE_INVOICE = "Update Invoice"
    INVOICE_PAID = "Invoice Paid"
    INVOICE_OVERDUE = "Invoice Overdue"
    REFUND_ISSUED = "Refund Issued"
    PAYMENT_FAILED = "Payment Failed"

    # System / admin
    SYSTEM_UPDATE = "System Update"
    SECURITY_ALERT = "Security Alert"
    BACKUP_COMPLETED = "Backup Completed"
    NEW_MESSAGE = "New Message"
    NEW_NOTIFICATION = "New Notification"
    BROADCAST_ANNOUNCEMENT = "Broadcast Announcement"
    USERS_AUTO_DELETED = "Users Auto-Deleted"
    USERS_AUTO_DELETE_DRY_RUN = "Users Auto-Delete Dry-Run"
    AUTO_DELETE_USERS_FAILED = "Auto Delete Users Failed"


class NotificationCategory(StringEnum):
    """Domain area a notification belongs to (not the action)."""

    USER = "User"
    TENANT = "Tenant"
    PROPERTY = "Property"
    LEASE = "Lease"
    AGENT = "Agent"
    DEVELOPER = "Developer"
    MAINTENANCE = "Maintenance"
    COMPLAINT = "Complaint"
    TEAM = "Team"
    REGISTRATION = "Registration"
    PAYMENT = "Payment"
    SYSTEM = "System"


class NotificationType(StringEnum):
    """Normalized action kind."""

    # Generic lifecycle
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ARCHIVE = "archive"
    RESTORE = "restore"
    PERMANENT_DELETE = "permanent_delete"
    # Assignment / routing
    ASSIGN = "assign"
    REASSIGN = "reassign"
    # Approvals / verification / publishing
    APPROVE = "approve"
    REJECT = "reject"
    VERIFY = "verify"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    # Lease lifecycle
    RENEW = "renew"
    TERMINATE = "terminate"
    EXPIRE = "expire"
    DOWNLOAD = "download"
    # Scheduling / progress
    SCHEDULE = "schedule"
    START = "start"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"
    # Maintenance workflow
    MAINTENANCE_REQUEST = "maintenance_request"
    MAINTENANCE_ACK = "maintenance_ack"
    MAINTENANCE_IN_PROGRESS = "maintenance_in_progress"
    MAINTENANCE_COMPLETED = "maintenance_completed"
    MAINTENANCE_CLOSED = "maintenance_closed"
    # Payments & billing
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_FAILED = "payment_failed"
    REFUND_ISSUED = "refund_issued"
    INVOICE_CREATED = "invoice_created"
    INVOICE_OVERDUE = "invoice_overdue"
    # Messaging
    NOTIFY = "notify"
    REMINDER = "reminder"
    ESCALATE = "escalate"
    BROADCAST = "broadcast"
    # Data ops
    IMPORT = "import"
    EXPORT = "export"
    SYNC = "sync"


class NotificationSeverity(StringEnum):
    """Notification severity levels."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationChannel(StringEnum):
    """Notification delivery channels."""

    IN_APP = "inapp"
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


class AudienceMode(StringEnum):
    USER = "user"
    ROLE = "role"
    BROADCAST = "broadcast"


class BroadcastEvent(StringEnum):
    """Event kinds published to broadcast rooms."""

    NOTIFICATION_NEW = "notification.new"
    RECYCLEBIN_RESTORED = "recyclebin.restored"
    RECYCLEBIN_DELETED = "recyclebin.deleted"
