from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from notifyhub.domain.exceptions import (
    DomainError,
    ForbiddenError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from notifyhub.domain.recycle import RestoreFailedError

# First match wins, so subclasses precede their bases
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (UnauthenticatedError, 401),
    (ValidationError, 422),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (InvalidStateError, 400),
    (RestoreFailedError, 502),
    (InfrastructureError, 500),
]


def status_code_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def configure_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(
            request: Request, exc: DomainError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code_for(exc),
            content={"kind": exc.kind, "detail": exc.message},
        )
