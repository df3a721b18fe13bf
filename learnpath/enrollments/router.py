"""Enrollment API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from learnpath.auth.dependencies import CurrentPrincipal, InstructorPrincipal
from learnpath.auth.schemas import require_principal
from learnpath.core.exceptions import LearnPathError
from learnpath.core.http_errors import handle_core_error

from .dependencies import EnrollmentServiceDep
from .schemas import (
    EnrollmentCountResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollmentStatusResponse,
    EnrollRequest,
)


router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])
course_enrollments_router = APIRouter(prefix="/v1/courses", tags=["enrollments"])


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll_in_course(
    data: EnrollRequest,
    enrollment_service: EnrollmentServiceDep,
    principal: CurrentPrincipal,
) -> EnrollmentResponse:
    """Explicitly enroll the current user in a course.

    Returns 409 if the user is already enrolled.
    """
    try:
        enrollment = await enrollment_service.enroll(principal, data.course_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return EnrollmentResponse.from_entity(enrollment)


@router.get(
    "/my",
    response_model=EnrollmentListResponse,
    summary="Get my enrollments",
)
async def get_my_enrollments(
    enrollment_service: EnrollmentServiceDep,
    principal: CurrentPrincipal,
) -> EnrollmentListResponse:
    """Get all course enrollments for the current user."""
    try:
        user = require_principal(principal)
    except LearnPathError as e:
        raise handle_core_error(e) from e

    enrollments = await enrollment_service.list_enrollments_for_student(user.user_id)
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )


@router.get(
    "/{course_id}",
    response_model=EnrollmentStatusResponse,
    summary="Check enrollment in course",
)
async def get_enrollment_status(
    course_id: UUID,
    enrollment_service: EnrollmentServiceDep,
    principal: CurrentPrincipal,
) -> EnrollmentStatusResponse:
    """Check whether the current user is enrolled in a course."""
    enrolled = await enrollment_service.is_enrolled(principal, course_id)
    return EnrollmentStatusResponse(course_id=course_id, enrolled=enrolled)


@course_enrollments_router.get(
    "/{course_id}/enrollments/count",
    response_model=EnrollmentCountResponse,
    summary="Count course enrollments",
)
async def get_course_enrollment_count(
    course_id: UUID,
    enrollment_service: EnrollmentServiceDep,
) -> EnrollmentCountResponse:
    """Number of students enrolled in a course."""
    count = await enrollment_service.count_course_enrollments(course_id)
    return EnrollmentCountResponse(course_id=course_id, count=count)


@course_enrollments_router.get(
    "/{course_id}/enrollments",
    response_model=EnrollmentListResponse,
    summary="Course roster",
)
async def get_course_roster(
    course_id: UUID,
    enrollment_service: EnrollmentServiceDep,
    principal: InstructorPrincipal,
) -> EnrollmentListResponse:
    """Students enrolled in a course. Course owner or admin only."""
    try:
        enrollments = await enrollment_service.list_course_roster(principal, course_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )
