"""Pydantic schemas for courses and lectures."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .models import Course, CourseSummary, Lecture, LectureKind, QuizQuestion


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Request to create a course."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    category: str | None = Field(default=None, max_length=100)
    image_url: str | None = None


class CourseResponse(BaseModel):
    """Course response."""

    id: UUID
    title: str
    description: str
    instructor_id: UUID
    category: str | None = None
    image_url: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Course) -> "CourseResponse":
        """Create response from entity."""
        return cls(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            instructor_id=entity.instructor_id,
            category=entity.category,
            image_url=entity.image_url,
            created_at=entity.created_at,
        )


class CourseSummaryResponse(CourseResponse):
    """Course card for the catalog and instructor dashboards."""

    lecture_count: int = 0
    enrollment_count: int = 0

    @classmethod
    def from_summary(
        cls, summary: CourseSummary, enrollment_count: int
    ) -> "CourseSummaryResponse":
        return cls(
            **CourseResponse.from_entity(summary.course).model_dump(),
            lecture_count=summary.lecture_count,
            enrollment_count=enrollment_count,
        )


class CourseListResponse(BaseModel):
    """List of course cards."""

    items: list[CourseSummaryResponse]
    total: int


# ==============================================================================
# Lecture Schemas
# ==============================================================================


class QuizQuestionInput(BaseModel):
    """Question as authored by the instructor."""

    question: str = Field(..., min_length=1)
    options: list[str] = Field(..., min_length=2)
    correct_option: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_correct_option(self) -> "QuizQuestionInput":
        if self.correct_option >= len(self.options):
            msg = "correct_option must index into options"
            raise ValueError(msg)
        return self


class CreateLectureRequest(BaseModel):
    """Request to add a lecture at the end of a course."""

    title: str = Field(..., min_length=1, max_length=200)
    kind: LectureKind
    content: str | None = None
    link: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
    questions: list[QuizQuestionInput] | None = None

    @model_validator(mode="after")
    def check_payload(self) -> "CreateLectureRequest":
        if self.kind == LectureKind.QUIZ and not self.questions:
            msg = "Quiz lectures need at least one question"
            raise ValueError(msg)
        if self.kind == LectureKind.READING and self.questions:
            msg = "Reading lectures cannot carry questions"
            raise ValueError(msg)
        return self


class LectureResponse(BaseModel):
    """Lecture response; ``correct_option`` is null for student viewers."""

    id: UUID
    course_id: UUID
    title: str
    kind: LectureKind
    position: int
    content: str | None = None
    link: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_type: str | None = None
    questions: list[QuizQuestion] | None = None

    @classmethod
    def from_entity(cls, entity: Lecture) -> "LectureResponse":
        """Create response from entity."""
        return cls(
            id=entity.id,
            course_id=entity.course_id,
            title=entity.title,
            kind=LectureKind(entity.kind),
            position=entity.position,
            content=entity.content,
            link=entity.link,
            file_url=entity.file_url,
            file_name=entity.file_name,
            file_type=entity.file_type,
            questions=entity.questions,
        )


class CourseWithLecturesResponse(CourseResponse):
    """Course with its lectures sorted by position."""

    lectures: list[LectureResponse] = []
