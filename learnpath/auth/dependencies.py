"""FastAPI dependencies for authentication.

Resolves the caller to a ``Principal`` once per request. Routes pass the
(possibly absent) principal into the services, which reject anonymous
callers with ``NotAuthenticatedError``.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from learnpath.auth.permissions import UserRole, has_permission
from learnpath.auth.schemas import Principal
from learnpath.auth.security import decode_access_token
from learnpath.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_principal(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Principal | None:
    """Resolve the caller from the access token.

    Returns:
        Principal, or None when no token was sent

    Raises:
        HTTPException(401): If a token was sent but is invalid or expired
    """
    if not token:
        return None

    try:
        payload = decode_access_token(token)
        principal = Principal(
            user_id=payload["sub"],
            role=payload.get("role", UserRole.STUDENT.value),
            email=payload.get("email"),
        )
    except (JWTError, PydanticValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_user_id(principal.user_id)
    return principal


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level.

    Example:
        @router.post("/courses")
        async def create_course(
            user: Annotated[Principal, Depends(require_permission(UserRole.INSTRUCTOR))]
        ):
            ...
    """

    async def permission_checker(
        principal: Annotated[Principal | None, Depends(get_current_principal)],
    ) -> Principal:
        if principal is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        if not has_permission(principal.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permission",
            )
        return principal

    return permission_checker


# Principal or None; services decide whether anonymous access is allowed
CurrentPrincipal = Annotated[Principal | None, Depends(get_current_principal)]

InstructorPrincipal = Annotated[
    Principal, Depends(require_permission(UserRole.INSTRUCTOR))
]
