"""Quiz API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from learnpath.auth.dependencies import CurrentPrincipal
from learnpath.core.exceptions import LearnPathError
from learnpath.core.http_errors import handle_core_error

from .dependencies import QuizServiceDep
from .schemas import (
    QuizAttemptListResponse,
    QuizAttemptResponse,
    QuizResultResponse,
    SubmitQuizRequest,
)


router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])


@router.post(
    "/{lecture_id}/submit",
    response_model=QuizResultResponse,
    summary="Submit quiz answers",
)
async def submit_quiz(
    lecture_id: UUID,
    data: SubmitQuizRequest,
    quiz_service: QuizServiceDep,
    principal: CurrentPrincipal,
) -> QuizResultResponse:
    """Grade the answers, store the attempt and record progress on a pass.

    Passing score is 70. Missing answers count as wrong.
    """
    try:
        return await quiz_service.submit_quiz(principal, lecture_id, data.answers)
    except LearnPathError as e:
        raise handle_core_error(e) from e


@router.get(
    "/{lecture_id}/attempts",
    response_model=QuizAttemptListResponse,
    summary="Get my quiz attempts",
)
async def get_quiz_attempts(
    lecture_id: UUID,
    quiz_service: QuizServiceDep,
    principal: CurrentPrincipal,
) -> QuizAttemptListResponse:
    """Attempt history of the current user on a quiz, oldest first."""
    try:
        attempts = await quiz_service.get_quiz_attempts(principal, lecture_id)
    except LearnPathError as e:
        raise handle_core_error(e) from e
    return QuizAttemptListResponse(
        items=[QuizAttemptResponse.from_entity(a) for a in attempts],
        total=len(attempts),
    )
