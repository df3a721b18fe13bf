"""Database models for lecture progress.

A progress record is the durable fact that a student completed a lecture.
There is at most one record per (student, lecture): the primary key makes a
duplicate impossible, and records are never deleted.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from learnpath.catalog.models import ensure_utc_aware


# Partition key: (user_id, course_id) to read a student's course progress at once
# Clustering: lecture_id (unique within the course)
LECTURE_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lecture_progress (
    user_id UUID,
    course_id UUID,
    lecture_id UUID,
    completed BOOLEAN,
    score INT,
    completed_at TIMESTAMP,
    PRIMARY KEY ((user_id, course_id), lecture_id)
)
"""

PROGRESS_TABLES_CQL = [
    LECTURE_PROGRESS_TABLE_CQL,
]


class ProgressRecord:
    """Lecture completion for a student.

    Attributes:
        user_id: Student UUID
        course_id: Course UUID (partition key)
        lecture_id: Lecture UUID
        completed: Completion flag
        score: Quiz score 0-100 (None for readings)
        completed_at: Completion timestamp
    """

    def __init__(
        self,
        user_id: UUID,
        course_id: UUID,
        lecture_id: UUID,
        completed: bool = True,
        score: int | None = None,
        completed_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.course_id = course_id
        self.lecture_id = lecture_id
        self.completed = completed
        self.score = score
        self.completed_at = ensure_utc_aware(completed_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        """Create ProgressRecord instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            course_id=row.course_id,
            lecture_id=row.lecture_id,
            completed=bool(row.completed),
            score=row.score,
            completed_at=row.completed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "course_id": self.course_id,
            "lecture_id": self.lecture_id,
            "completed": self.completed,
            "score": self.score,
            "completed_at": self.completed_at,
        }

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord user={self.user_id} lecture={self.lecture_id} "
            f"completed={self.completed} score={self.score}>"
        )
