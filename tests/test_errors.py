"""Tests for service errors and their HTTP mapping."""

from uuid import uuid4

import pytest

from learnpath.core.exceptions import (
    AlreadyEnrolledError,
    InvalidLectureKindError,
    LearnPathError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    parse_identity,
)
from learnpath.core.http_errors import handle_core_error


@pytest.mark.parametrize(
    "error,status_code",
    [
        (NotAuthenticatedError(), 401),
        (NotFoundError(), 404),
        (InvalidLectureKindError(), 422),
        (AlreadyEnrolledError(), 409),
        (ValidationError(), 422),
        (PermissionDeniedError(), 403),
        (LearnPathError("taken", "position_conflict"), 409),
        (LearnPathError("boom"), 500),
    ],
)
def test_status_mapping(error: LearnPathError, status_code: int) -> None:
    exc = handle_core_error(error)
    assert exc.status_code == status_code
    assert exc.detail == error.message


def test_unauthenticated_carries_challenge() -> None:
    exc = handle_core_error(NotAuthenticatedError())
    assert exc.headers == {"WWW-Authenticate": "Bearer"}


def test_errors_share_base() -> None:
    assert isinstance(AlreadyEnrolledError(), LearnPathError)
    assert AlreadyEnrolledError().code == "already_enrolled"


class TestParseIdentity:
    """Tests for parse_identity."""

    def test_uuid_passthrough(self) -> None:
        value = uuid4()
        assert parse_identity(value) is value

    def test_string_parsed(self) -> None:
        value = uuid4()
        assert parse_identity(str(value)) == value

    @pytest.mark.parametrize("bad", ["", "abc", "1234", None])
    def test_malformed(self, bad) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_identity(bad, "course_id")
        assert "course_id" in exc_info.value.message
