"""Service-layer errors shared by the enrollment, progress and quiz modules.

Every error carries a stable ``code`` that the HTTP layer maps to a status
code. Services raise them unmodified and never retry or partially recover.
"""

from uuid import UUID


class LearnPathError(Exception):
    """Base service error."""

    def __init__(self, message: str, code: str = "learnpath_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotAuthenticatedError(LearnPathError):
    """No resolvable principal for the operation."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "not_authenticated")


class NotFoundError(LearnPathError):
    """Referenced course or lecture does not exist."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, "not_found")


class InvalidLectureKindError(LearnPathError):
    """Operation applied to the wrong kind of lecture."""

    def __init__(self, message: str = "Invalid lecture for this operation"):
        super().__init__(message, "invalid_lecture_kind")


class AlreadyEnrolledError(LearnPathError):
    """Explicit enrollment requested for an existing enrollment."""

    def __init__(self, message: str = "Already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class ValidationError(LearnPathError):
    """Genuinely malformed input (unparseable identity, non-integer answer)."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error")


class PermissionDeniedError(LearnPathError):
    """Caller lacks the role or ownership required."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, "permission_denied")


def parse_identity(value: UUID | str, field: str = "id") -> UUID:
    """Parse a course, lecture or user identity.

    Raises:
        ValidationError: If the value is not a valid UUID
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {value!r}") from e
