"""Role-based access control for LearnPath.

Hierarchical roles:
- ADMIN (level 2): Full system access
- INSTRUCTOR (level 1): Creates courses and lectures, sees quiz answers
- STUDENT (level 0): Enrolls, reads, takes quizzes
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.STUDENT: 0,
    UserRole.INSTRUCTOR: 1,
    UserRole.ADMIN: 2,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role.

    Unknown role strings get the lowest level.
    """
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.INSTRUCTOR)
        True
        >>> has_permission("student", "instructor")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_student(role: UserRole | str) -> bool:
    """Check if role is exactly STUDENT."""
    if isinstance(role, UserRole):
        return role == UserRole.STUDENT
    return role == UserRole.STUDENT.value


def is_at_least_instructor(role: UserRole | str) -> bool:
    """Check if role is INSTRUCTOR or higher (ADMIN)."""
    return has_permission(role, UserRole.INSTRUCTOR)
