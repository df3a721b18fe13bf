"""Database models for course enrollments.

Architecture: Dual-write pattern so enrollments can be read both per course
("who is enrolled here?") and per student ("where am I enrolled?"). The
course-partitioned table is authoritative; uniqueness per (course, user) is
enforced there with a lightweight transaction.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from learnpath.catalog.models import ensure_utc_aware


# Partition key: course_id, so a course's roster is one partition
ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    course_id UUID,
    user_id UUID,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (course_id, user_id)
)
"""

# Lookup: courses per user
ENROLLMENTS_BY_USER_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_user (
    user_id UUID,
    course_id UUID,
    enrolled_at TIMESTAMP,
    PRIMARY KEY (user_id, course_id)
)
"""

ENROLLMENTS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_USER_TABLE_CQL,
]


class Enrollment:
    """Course enrollment entity.

    Attributes:
        course_id: Course UUID
        user_id: Student UUID
        enrolled_at: Enrollment timestamp
    """

    def __init__(
        self,
        course_id: UUID,
        user_id: UUID,
        enrolled_at: datetime | None = None,
    ):
        self.course_id = course_id
        self.user_id = user_id
        self.enrolled_at = ensure_utc_aware(enrolled_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from a row of either table."""
        return cls(
            course_id=row.course_id,
            user_id=row.user_id,
            enrolled_at=row.enrolled_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "course_id": self.course_id,
            "user_id": self.user_id,
            "enrolled_at": self.enrolled_at,
        }

    def __repr__(self) -> str:
        return f"<Enrollment user={self.user_id} course={self.course_id}>"
