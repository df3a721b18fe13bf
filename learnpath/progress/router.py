"""Student progress API endpoints.

Provides routes for:
- Reading completion
- Course progress and outline (unlock state)
- Single lecture completion check
"""

from uuid import UUID

from fastapi import APIRouter

from learnpath.auth.dependencies import CurrentPrincipal
from learnpath.core.exceptions import LearnPathError
from learnpath.core.http_errors import handle_core_error

from .dependencies import ProgressServiceDep
from .schemas import (
    CourseOutlineResponse,
    CourseProgressResponse,
    LectureCompletionResponse,
    ProgressRecordResponse,
)


router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.post(
    "/lectures/{lecture_id}/complete",
    response_model=ProgressRecordResponse,
    summary="Complete a reading lecture",
)
async def complete_reading(
    lecture_id: UUID,
    progress_service: ProgressServiceDep,
    principal: CurrentPrincipal,
) -> ProgressRecordResponse:
    """Mark a reading lecture as completed.

    Auto-enrolls the caller in the course. Calling it again returns the
    original record.
    """
    try:
        record = await progress_service.record_reading_completion(
            principal, lecture_id
        )
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return ProgressRecordResponse.from_entity(record)


@router.get(
    "/lectures/{lecture_id}",
    response_model=LectureCompletionResponse,
    summary="Check lecture completion",
)
async def get_lecture_completion(
    lecture_id: UUID,
    progress_service: ProgressServiceDep,
    principal: CurrentPrincipal,
) -> LectureCompletionResponse:
    """Whether the caller has completed a lecture."""
    try:
        completed = await progress_service.is_lecture_completed(principal, lecture_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return LectureCompletionResponse(lecture_id=lecture_id, completed=completed)


@router.get(
    "/courses/{course_id}",
    response_model=CourseProgressResponse,
    summary="Get course progress",
)
async def get_course_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    principal: CurrentPrincipal,
) -> CourseProgressResponse:
    """Completed and total lecture counts with the rounded percentage."""
    try:
        return await progress_service.get_course_progress(principal, course_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e


@router.get(
    "/courses/{course_id}/outline",
    response_model=CourseOutlineResponse,
    summary="Get course outline with unlock state",
)
async def get_course_outline(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    principal: CurrentPrincipal,
) -> CourseOutlineResponse:
    """Lectures in order, each flagged completed and accessible.

    A lecture is accessible when it is the first one or the previous lecture
    is completed.
    """
    try:
        return await progress_service.get_course_outline(principal, course_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
