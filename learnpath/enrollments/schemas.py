"""Pydantic schemas for course enrollment."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import Enrollment


class EnrollRequest(BaseModel):
    """Request to enroll in a course."""

    course_id: UUID = Field(..., description="Course UUID to enroll in")


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    course_id: UUID
    user_id: UUID
    enrolled_at: datetime

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        """Create response from entity."""
        return cls(
            course_id=entity.course_id,
            user_id=entity.user_id,
            enrolled_at=entity.enrolled_at,
        )


class EnrollmentListResponse(BaseModel):
    """List of enrollments, per student or per course."""

    items: list[EnrollmentResponse]
    total: int


class EnrollmentStatusResponse(BaseModel):
    """Whether the caller is enrolled in a course."""

    course_id: UUID
    enrolled: bool


class EnrollmentCountResponse(BaseModel):
    """Number of students enrolled in a course."""

    course_id: UUID
    count: int
