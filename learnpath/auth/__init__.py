"""Identity resolution and role checks."""

from learnpath.auth.permissions import UserRole
from learnpath.auth.schemas import Principal, require_principal


__all__ = ["Principal", "UserRole", "require_principal"]
