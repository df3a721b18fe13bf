"""Conversion of service errors into HTTP exceptions."""

from fastapi import HTTPException, status

from learnpath.core.exceptions import LearnPathError


ERROR_STATUS_MAP: dict[str, int] = {
    "not_authenticated": status.HTTP_401_UNAUTHORIZED,
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_lecture_kind": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "already_enrolled": status.HTTP_409_CONFLICT,
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "permission_denied": status.HTTP_403_FORBIDDEN,
    "position_conflict": status.HTTP_409_CONFLICT,
}


def handle_core_error(error: LearnPathError) -> HTTPException:
    """Convert a service error to an HTTPException with the mapped status.

    Args:
        error: Service error

    Returns:
        HTTPException with appropriate status code
    """
    status_code = ERROR_STATUS_MAP.get(
        error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    headers = (
        {"WWW-Authenticate": "Bearer"}
        if status_code == status.HTTP_401_UNAUTHORIZED
        else None
    )
    return HTTPException(status_code=status_code, detail=error.message, headers=headers)
