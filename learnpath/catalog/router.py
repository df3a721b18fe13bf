"""Course and lecture API endpoints.

Provides routes for:
- Course creation and lookup (with lectures in order)
- Course listings for the catalog and the instructor dashboard
- Lecture creation at the end of a course
- Lecture lookup with quiz answers hidden from students
"""

import asyncio
from uuid import UUID

from fastapi import APIRouter, status

from learnpath.auth.dependencies import CurrentPrincipal, InstructorPrincipal
from learnpath.auth.schemas import require_principal
from learnpath.core.exceptions import LearnPathError
from learnpath.core.http_errors import handle_core_error
from learnpath.enrollments.dependencies import EnrollmentServiceDep
from learnpath.enrollments.service import EnrollmentService
from learnpath.quizzes.grading import redact_lecture_for_viewer

from .dependencies import CatalogServiceDep
from .models import CourseSummary
from .schemas import (
    CourseListResponse,
    CourseResponse,
    CourseSummaryResponse,
    CourseWithLecturesResponse,
    CreateCourseRequest,
    CreateLectureRequest,
    LectureResponse,
)


router = APIRouter(prefix="/v1/courses", tags=["courses"])
lectures_router = APIRouter(prefix="/v1/lectures", tags=["lectures"])


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    catalog_service: CatalogServiceDep,
    principal: InstructorPrincipal,
) -> CourseResponse:
    """Create a course owned by the current instructor."""
    try:
        course = await catalog_service.create_course(principal, data)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return CourseResponse.from_entity(course)


@router.get("", response_model=CourseListResponse, summary="List courses")
async def list_courses(
    catalog_service: CatalogServiceDep,
    enrollment_service: EnrollmentServiceDep,
) -> CourseListResponse:
    """Course catalog, newest first, with lecture and enrollment counts."""
    summaries = await catalog_service.list_courses()
    return await _course_list(summaries, enrollment_service)


@router.get("/mine", response_model=CourseListResponse, summary="List my courses")
async def list_my_courses(
    catalog_service: CatalogServiceDep,
    enrollment_service: EnrollmentServiceDep,
    principal: InstructorPrincipal,
) -> CourseListResponse:
    """Courses owned by the current instructor, newest first."""
    try:
        summaries = await catalog_service.list_instructor_courses(principal)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return await _course_list(summaries, enrollment_service)


@router.get(
    "/{course_id}",
    response_model=CourseWithLecturesResponse,
    summary="Get course with lectures",
)
async def get_course(
    course_id: UUID,
    catalog_service: CatalogServiceDep,
    principal: CurrentPrincipal,
) -> CourseWithLecturesResponse:
    """Course details and its lectures sorted by position."""
    try:
        course = await catalog_service.require_course(course_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e

    role = principal.role if principal else None
    lectures = await catalog_service.list_course_lectures(course_id)
    return CourseWithLecturesResponse(
        **CourseResponse.from_entity(course).model_dump(),
        lectures=[
            LectureResponse.from_entity(redact_lecture_for_viewer(lecture, role))
            for lecture in lectures
        ],
    )


@router.post(
    "/{course_id}/lectures",
    response_model=LectureResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add lecture to course",
)
async def create_lecture(
    course_id: UUID,
    data: CreateLectureRequest,
    catalog_service: CatalogServiceDep,
    principal: InstructorPrincipal,
) -> LectureResponse:
    """Append a lecture; its position is the current lecture count plus one.

    Only the instructor who owns the course may add lectures.
    """
    try:
        lecture = await catalog_service.create_lecture(principal, course_id, data)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return LectureResponse.from_entity(lecture)


@lectures_router.get(
    "/{lecture_id}",
    response_model=LectureResponse,
    summary="Get lecture",
)
async def get_lecture(
    lecture_id: UUID,
    catalog_service: CatalogServiceDep,
    principal: CurrentPrincipal,
) -> LectureResponse:
    """Lecture content. Students do not see the correct quiz options."""
    try:
        user = require_principal(principal)
        lecture = await catalog_service.require_lecture(lecture_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return LectureResponse.from_entity(redact_lecture_for_viewer(lecture, user.role))


async def _course_list(
    summaries: list[CourseSummary],
    enrollment_service: EnrollmentService,
) -> CourseListResponse:
    counts = await asyncio.gather(
        *(
            enrollment_service.count_course_enrollments(summary.course.id)
            for summary in summaries
        )
    )
    items = [
        CourseSummaryResponse.from_summary(summary, count)
        for summary, count in zip(summaries, counts, strict=True)
    ]
    return CourseListResponse(items=items, total=len(items))
