from notifyhub.domain.exceptions import (
    DomainError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


class InvalidCategoryError(ValidationError):
    kind = "invalid_category"

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Unknown category '{category}'")


class NothingToRestoreError(NotFoundError):
    kind = "nothing_to_restore"

    def __init__(self, category: str, identifier: str) -> None:
        super().__init__(f"Restorable {category}", identifier)


class RecyclePermissionError(ForbiddenError):
    kind = "permission_denied"

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Role '{role}' may not restore or permanently delete records")


class PathEscapeError(InvalidStateError):
    """Snapshot locator resolves outside the recycle-bin root."""

    kind = "path_escape"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path escapes recycle-bin root: {path}")


class RestoreFailedError(DomainError):
    """The domain-record store refused or failed the reinstate/purge."""

    kind = "restore_failed"
