class DomainError(Exception):
    """Base for all domain errors.

    `kind` is the machine-readable identifier surfaced to API clients alongside
    the human-readable message.
    """

    kind: str = "domain_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Entity not found (maps to 404)."""

    kind = "not_found"

    def __init__(self, entity: str, identifier: str) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found")


class ValidationError(DomainError):
    """Business validation failed (maps to 422)."""

    kind = "validation_error"


class ForbiddenError(DomainError):
    """Authenticated but not permitted (maps to 403)."""

    kind = "forbidden"


class InvalidStateError(DomainError):
    """Invalid state for operation (maps to 400)."""

    kind = "invalid_state"


class InfrastructureError(DomainError):
    """Infrastructure failure - DB, Redis, filesystem (maps to 500)."""

    kind = "infrastructure_error"


class UnauthenticatedError(DomainError):
    """Caller identity missing or unusable (maps to 401)."""

    kind = "unauthenticated"
