"""Shared fixtures: mocked Cassandra session, principals and catalog entities."""

from collections.abc import Callable, Iterable
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, Mock
from uuid import UUID, uuid4

import pytest
from cassandra.cluster import Session
from fastapi.testclient import TestClient

from learnpath.auth.permissions import UserRole
from learnpath.auth.schemas import Principal
from learnpath.catalog.models import Lecture, LectureKind, QuizQuestion


@pytest.fixture
def mock_session():
    """Mock Cassandra session (cassandra-asyncio-driver style)."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(name="prepared", cql=cql))
    session.aexecute = AsyncMock(return_value=MagicMock())
    return session


@pytest.fixture
def make_result() -> Callable[..., MagicMock]:
    """Factory for driver result sets.

    ``one()`` returns the first row (or None), iteration yields all rows and
    ``was_applied`` answers lightweight transactions.
    """

    def _make(
        rows: Iterable[Any] = (),
        applied: bool = True,
    ) -> MagicMock:
        rows = list(rows)
        result = MagicMock()
        result.one.return_value = rows[0] if rows else None
        result.__iter__.return_value = rows
        result.was_applied = applied
        return result

    return _make


class RecordingBatch:
    """Stand-in for ``cassandra.query.BatchStatement`` that keeps what was added."""

    def __init__(self, *args, **kwargs):
        self.entries = []

    def add(self, statement, parameters=None):
        self.entries.append((statement, parameters))


@pytest.fixture
def recording_batch(monkeypatch) -> type[RecordingBatch]:
    """Swap the driver batch in every service that writes through one."""
    for module in ("learnpath.catalog.service", "learnpath.quizzes.service"):
        monkeypatch.setattr(f"{module}.BatchStatement", RecordingBatch)
    return RecordingBatch


@pytest.fixture
def make_row() -> Callable[..., SimpleNamespace]:
    """Cassandra row stand-in with attribute access."""
    return lambda **columns: SimpleNamespace(**columns)


@pytest.fixture
def course_id() -> UUID:
    return uuid4()


@pytest.fixture
def student() -> Principal:
    """Authenticated student principal."""
    return Principal(user_id=uuid4(), role=UserRole.STUDENT, email="aluno@test.com")


@pytest.fixture
def instructor() -> Principal:
    """Authenticated instructor principal."""
    return Principal(
        user_id=uuid4(), role=UserRole.INSTRUCTOR, email="instrutor@test.com"
    )


@pytest.fixture
def make_questions() -> Callable[[list[int]], list[QuizQuestion]]:
    """Build questions whose correct options are the given indexes."""

    def _make(correct: list[int]) -> list[QuizQuestion]:
        return [
            QuizQuestion(
                question=f"Question {i + 1}",
                options=["a", "b", "c", "d"],
                correct_option=option,
            )
            for i, option in enumerate(correct)
        ]

    return _make


@pytest.fixture
def make_lecture(course_id: UUID) -> Callable[..., Lecture]:
    """Build a lecture in the ``course_id`` course."""

    def _make(
        kind: LectureKind = LectureKind.READING,
        position: int = 1,
        questions: list[QuizQuestion] | None = None,
        **kwargs: Any,
    ) -> Lecture:
        return Lecture(
            course_id=kwargs.pop("course_id", course_id),
            title=kwargs.pop("title", f"Lecture {position}"),
            kind=kind.value,
            position=position,
            questions=questions,
            **kwargs,
        )

    return _make


# ==============================================================================
# HTTP fixtures
# ==============================================================================

SERVICE_ATTRS = (
    "cassandra_session",
    "catalog_service",
    "enrollment_service",
    "progress_service",
    "quiz_service",
)


@pytest.fixture
def app():
    """Application without lifespan; tests attach services to ``app.state``."""
    from learnpath.main import app

    yield app

    for name in SERVICE_ATTRS:
        if hasattr(app.state, name):
            delattr(app.state, name)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def _bearer(principal: Principal) -> dict[str, str]:
    from learnpath.auth.security import create_access_token

    token = create_access_token(
        {
            "sub": str(principal.user_id),
            "email": principal.email,
            "role": principal.role.value,
        }
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(student: Principal) -> dict[str, str]:
    """Authorization header for the ``student`` principal."""
    return _bearer(student)


@pytest.fixture
def instructor_headers(instructor: Principal) -> dict[str, str]:
    """Authorization header for the ``instructor`` principal."""
    return _bearer(instructor)
