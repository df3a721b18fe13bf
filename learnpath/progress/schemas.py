"""Pydantic schemas for lecture progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from learnpath.catalog.models import LectureKind

from .models import ProgressRecord


class ProgressRecordResponse(BaseModel):
    """Progress record for one lecture."""

    lecture_id: UUID
    course_id: UUID
    user_id: UUID
    completed: bool
    score: int | None = Field(None, description="Quiz score 0-100")
    completed_at: datetime

    @classmethod
    def from_entity(cls, entity: ProgressRecord) -> "ProgressRecordResponse":
        """Create response from entity."""
        return cls(
            lecture_id=entity.lecture_id,
            course_id=entity.course_id,
            user_id=entity.user_id,
            completed=entity.completed,
            score=entity.score,
            completed_at=entity.completed_at,
        )


class CourseProgressResponse(BaseModel):
    """Aggregate progress of the caller in a course."""

    course_id: UUID
    total_lectures: int
    completed_lectures: int
    progress_percentage: int = Field(description="0-100, rounded half up")
    lectures: list[ProgressRecordResponse] = Field(default_factory=list)


class LectureOutlineItem(BaseModel):
    """Lecture with derived unlock/completion state."""

    lecture_id: UUID
    title: str
    kind: LectureKind
    position: int
    completed: bool
    accessible: bool


class CourseOutlineResponse(BaseModel):
    """Ordered lecture outline of a course for the caller."""

    course_id: UUID
    lectures: list[LectureOutlineItem]


class LectureCompletionResponse(BaseModel):
    """Whether the caller has completed a lecture."""

    lecture_id: UUID
    completed: bool
