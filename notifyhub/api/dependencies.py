from fastapi import Depends, Header

from notifyhub.domain.enums import UserRole
from notifyhub.domain.exceptions import ForbiddenError, UnauthenticatedError
from notifyhub.domain.user import Principal


async def current_principal(
    x_username: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Principal:
    """Caller identity forwarded by the authenticating gateway."""
    username = (x_username or "").strip()
    if not username:
        raise UnauthenticatedError("Missing X-Username header")
    try:
        role = UserRole((x_user_role or "").strip().lower())
    except ValueError:
        raise UnauthenticatedError(f"Unknown role '{x_user_role}'") from None
    return Principal(username=username, role=role)


async def admin_principal(principal: Principal = Depends(current_principal)) -> Principal:
    """Caller must be an admin."""
    if principal.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return principal
