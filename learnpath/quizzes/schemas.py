"""Pydantic schemas for quiz submission and attempt history."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, StrictInt

from .models import QuizAttempt


class SubmitQuizRequest(BaseModel):
    """Selected option index per question, in question order."""

    answers: list[StrictInt] = Field(default_factory=list)


class QuizResultResponse(BaseModel):
    """Graded outcome of a submission."""

    attempt_id: UUID
    lecture_id: UUID
    score: int = Field(ge=0, le=100)
    passed: bool
    correct_count: int
    total_questions: int
    attempted_at: datetime


class QuizAttemptResponse(BaseModel):
    """Stored quiz attempt."""

    attempt_id: UUID
    lecture_id: UUID
    answers: list[int]
    score: int
    passed: bool
    attempted_at: datetime

    @classmethod
    def from_entity(cls, entity: QuizAttempt) -> "QuizAttemptResponse":
        """Create response from entity."""
        return cls(
            attempt_id=entity.attempt_id,
            lecture_id=entity.lecture_id,
            answers=entity.answers,
            score=entity.score,
            passed=entity.passed,
            attempted_at=entity.attempted_at,
        )


class QuizAttemptListResponse(BaseModel):
    """Attempts of the caller on one quiz, oldest first."""

    items: list[QuizAttemptResponse]
    total: int
