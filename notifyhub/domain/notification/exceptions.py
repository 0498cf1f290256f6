from notifyhub.domain.exceptions import ForbiddenError, NotFoundError, ValidationError


class NotificationNotFoundError(NotFoundError):
    """Raised when a notification master is not found."""

    kind = "notification_not_found"

    def __init__(self, notification_id: str) -> None:
        super().__init__("Notification", notification_id)


class InvalidAudienceError(ValidationError):
    """Audience mode is missing or its target collection is empty."""

    kind = "invalid_audience"


class NoCategoryMappingError(ValidationError):
    """Title has no entry in the title -> category mapping."""

    kind = "no_category_mapping"

    def __init__(self, title: str) -> None:
        self.title = title
        super().__init__(f'No category mapping for title "{title}"')


class NotificationPermissionError(ForbiddenError):
    """Caller's role may not author notifications."""

    kind = "permission_denied"

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Role '{role}' may not create notifications")
