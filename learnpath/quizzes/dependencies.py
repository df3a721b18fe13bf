"""FastAPI dependencies for quizzes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import QuizService


async def get_quiz_service(request: Request) -> QuizService:
    """Get quiz service from app state.

    Raises:
        HTTPException(503): If the service was not initialized
    """
    service = getattr(request.app.state, "quiz_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quiz service not available",
        )
    return service


QuizServiceDep = Annotated[QuizService, Depends(get_quiz_service)]
