"""Database models for quiz attempts.

Attempts are append-only history: every submission writes a new row and no
row is ever updated. Clustering by attempt time keeps a student's attempts on
a lecture in chronological order.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from learnpath.catalog.models import ensure_utc_aware


# Partition key: (user_id, lecture_id)
# Clustering: attempted_at, attempt_id (two attempts in the same millisecond
# stay distinct)
QUIZ_ATTEMPTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts (
    user_id UUID,
    lecture_id UUID,
    attempted_at TIMESTAMP,
    attempt_id UUID,
    course_id UUID,
    answers LIST<INT>,
    score INT,
    passed BOOLEAN,
    PRIMARY KEY ((user_id, lecture_id), attempted_at, attempt_id)
) WITH CLUSTERING ORDER BY (attempted_at ASC, attempt_id ASC)
"""

QUIZ_TABLES_CQL = [
    QUIZ_ATTEMPTS_TABLE_CQL,
]


class QuizAttempt:
    """One graded quiz submission.

    Attributes:
        attempt_id: Attempt UUID
        user_id: Student UUID
        lecture_id: Quiz lecture UUID
        course_id: Course UUID of the lecture
        answers: Selected option index per question, in question order
        score: Integer 0-100
        passed: score >= passing threshold
        attempted_at: Submission timestamp
    """

    def __init__(
        self,
        user_id: UUID,
        lecture_id: UUID,
        course_id: UUID,
        answers: list[int],
        score: int,
        passed: bool,
        attempt_id: UUID | None = None,
        attempted_at: datetime | None = None,
    ):
        self.attempt_id = attempt_id or uuid4()
        self.user_id = user_id
        self.lecture_id = lecture_id
        self.course_id = course_id
        self.answers = list(answers)
        self.score = score
        self.passed = passed
        self.attempted_at = ensure_utc_aware(attempted_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "QuizAttempt":
        """Create QuizAttempt instance from Cassandra row."""
        return cls(
            attempt_id=row.attempt_id,
            user_id=row.user_id,
            lecture_id=row.lecture_id,
            course_id=row.course_id,
            answers=row.answers or [],
            score=row.score,
            passed=bool(row.passed),
            attempted_at=row.attempted_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "attempt_id": self.attempt_id,
            "user_id": self.user_id,
            "lecture_id": self.lecture_id,
            "course_id": self.course_id,
            "answers": self.answers,
            "score": self.score,
            "passed": self.passed,
            "attempted_at": self.attempted_at,
        }

    def __repr__(self) -> str:
        return (
            f"<QuizAttempt {self.attempt_id} lecture={self.lecture_id} "
            f"score={self.score} passed={self.passed}>"
        )
