"""Database models for the course catalog.

Courses and their ordered lectures are owned by instructors. The progress
engine only reads them: lecture kind, course membership, position within the
course and the stored quiz questions.

Cassandra table definitions for:
- Courses: Main course table
- Lectures: Main lecture table (reading or quiz payload)
- Lectures by course: Ordered junction, one row per position
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, NamedTuple
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, TypeAdapter


class LectureKind(str, Enum):
    """Lecture content kind."""

    READING = "reading"
    QUIZ = "quiz"


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    instructor_id UUID,
    category TEXT,
    image_url TEXT,
    created_at TIMESTAMP
)
"""

LECTURE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lectures (
    id UUID PRIMARY KEY,
    course_id UUID,
    title TEXT,
    kind TEXT,
    position INT,
    content TEXT,
    link TEXT,
    file_url TEXT,
    file_name TEXT,
    file_type TEXT,
    questions TEXT,
    created_at TIMESTAMP
)
"""

# Ordered lecture listing per course
# Clustering on position keeps lectures sorted; position is unique per course
LECTURES_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lectures_by_course (
    course_id UUID,
    position INT,
    lecture_id UUID,
    PRIMARY KEY (course_id, position)
) WITH CLUSTERING ORDER BY (position ASC)
"""

# Instructor dashboard listing, newest first
COURSES_BY_INSTRUCTOR_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_instructor (
    instructor_id UUID,
    created_at TIMESTAMP,
    course_id UUID,
    PRIMARY KEY (instructor_id, created_at, course_id)
) WITH CLUSTERING ORDER BY (created_at DESC, course_id ASC)
"""

CATALOG_TABLES_CQL = [
    COURSE_TABLE_CQL,
    COURSES_BY_INSTRUCTOR_TABLE_CQL,
    LECTURE_TABLE_CQL,
    LECTURES_BY_COURSE_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class QuizQuestion(BaseModel):
    """A multiple-choice question.

    ``correct_option`` is the index of the right entry in ``options``. It is
    always set in storage and only blanked by the read-time redaction applied
    for students.
    """

    question: str
    options: list[str] = Field(default_factory=list)
    correct_option: int | None = None


_questions_adapter = TypeAdapter(list[QuizQuestion])


def dump_questions(questions: list[QuizQuestion] | None) -> str | None:
    """Serialize questions for the TEXT column."""
    if questions is None:
        return None
    return _questions_adapter.dump_json(questions).decode()


def load_questions(raw: str | None) -> list[QuizQuestion] | None:
    """Deserialize questions from the TEXT column."""
    if not raw:
        return None
    return _questions_adapter.validate_json(raw)


class Course:
    """Course entity.

    Attributes:
        id: Course UUID
        title: Course title
        description: Course description
        instructor_id: Owning instructor UUID
        category: Optional category label
        image_url: Optional cover image URL
        created_at: Creation timestamp
    """

    def __init__(
        self,
        title: str,
        instructor_id: UUID,
        description: str = "",
        id: UUID | None = None,
        category: str | None = None,
        image_url: str | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title
        self.description = description
        self.instructor_id = instructor_id
        self.category = category
        self.image_url = image_url
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title,
            description=row.description or "",
            instructor_id=row.instructor_id,
            category=row.category,
            image_url=row.image_url,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Course {self.id} {self.title!r}>"


class CourseSummary(NamedTuple):
    """Course with its lecture count, for dashboard listings."""

    course: Course
    lecture_count: int


class Lecture:
    """Lecture entity (reading or quiz).

    Attributes:
        id: Lecture UUID
        course_id: Course UUID
        title: Lecture title
        kind: reading or quiz
        position: 1-based order within the course
        content: Reading text
        link: Reading external link
        file_url: Reading attachment URL
        file_name: Reading attachment name
        file_type: Reading attachment MIME type
        questions: Quiz questions (quiz lectures only)
        created_at: Creation timestamp
    """

    def __init__(
        self,
        course_id: UUID,
        title: str,
        kind: str,
        position: int,
        id: UUID | None = None,
        content: str | None = None,
        link: str | None = None,
        file_url: str | None = None,
        file_name: str | None = None,
        file_type: str | None = None,
        questions: list[QuizQuestion] | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.course_id = course_id
        self.title = title
        self.kind = kind
        self.position = position
        self.content = content
        self.link = link
        self.file_url = file_url
        self.file_name = file_name
        self.file_type = file_type
        self.questions = questions
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @property
    def is_reading(self) -> bool:
        return self.kind == LectureKind.READING.value

    @property
    def is_quiz(self) -> bool:
        return self.kind == LectureKind.QUIZ.value

    @classmethod
    def from_row(cls, row: Any) -> "Lecture":
        """Create Lecture instance from Cassandra row."""
        return cls(
            id=row.id,
            course_id=row.course_id,
            title=row.title,
            kind=row.kind,
            position=row.position,
            content=row.content,
            link=row.link,
            file_url=row.file_url,
            file_name=row.file_name,
            file_type=row.file_type,
            questions=load_questions(row.questions),
            created_at=row.created_at,
        )

    def copy_with_questions(self, questions: list[QuizQuestion] | None) -> "Lecture":
        """Return a copy of this lecture carrying different questions."""
        return Lecture(
            id=self.id,
            course_id=self.course_id,
            title=self.title,
            kind=self.kind,
            position=self.position,
            content=self.content,
            link=self.link,
            file_url=self.file_url,
            file_name=self.file_name,
            file_type=self.file_type,
            questions=questions,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<Lecture {self.id} #{self.position} {self.kind}>"
