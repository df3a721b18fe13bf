"""Authenticated principal passed explicitly into service operations."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from learnpath.auth.permissions import UserRole
from learnpath.core.exceptions import NotAuthenticatedError


class Principal(BaseModel):
    """Resolved identity of the caller.

    Built once per request at the transport boundary from the access token.
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    role: UserRole = UserRole.STUDENT
    email: str | None = None


def require_principal(principal: Principal | None) -> Principal:
    """Return the principal or reject an anonymous caller.

    Raises:
        NotAuthenticatedError: If no principal was resolved
    """
    if principal is None:
        raise NotAuthenticatedError
    return principal
