"""Quiz grading service layer.

Business logic for:
- Submitting a quiz (grade, append attempt, record progress on pass)
- Attempt history per student and lecture

The attempt insert and the progress upsert of a passing submission go out as
one logged batch: either both rows are written or neither is.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from cassandra.query import BatchStatement

from learnpath.auth.schemas import Principal, require_principal
from learnpath.core.exceptions import InvalidLectureKindError, parse_identity
from learnpath.progress.models import ProgressRecord

from .grading import grade_answers, normalize_answers
from .models import QuizAttempt
from .schemas import QuizResultResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from learnpath.catalog.service import CatalogService
    from learnpath.enrollments.service import EnrollmentService
    from learnpath.progress.service import ProgressService

logger = structlog.get_logger(__name__)


class QuizService:
    """Service for quiz submissions and attempt history."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        catalog: "CatalogService",
        enrollments: "EnrollmentService",
        progress: "ProgressService",
    ):
        """Initialize with Cassandra session and collaborating services."""
        self.session = session
        self.keyspace = keyspace
        self.catalog = catalog
        self.enrollments = enrollments
        self.progress = progress
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_attempt = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts
            (user_id, lecture_id, attempted_at, attempt_id, course_id,
             answers, score, passed)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_attempts = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quiz_attempts
            WHERE user_id = ? AND lecture_id = ?
        """)

    async def submit_quiz(
        self,
        principal: Principal | None,
        lecture_id: UUID | str,
        answers: Sequence[Any],
    ) -> QuizResultResponse:
        """Grade a submission and record it.

        Every submission is stored as a new attempt. A passing one also
        creates or overwrites the progress record; a failing one leaves
        progress untouched, so an earlier pass is never downgraded.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the lecture does not exist
            InvalidLectureKindError: If the lecture is not a quiz with questions
            ValidationError: If the lecture id or an answer is malformed
        """
        principal = require_principal(principal)
        lecture_id = parse_identity(lecture_id, "lecture_id")
        lecture = await self.catalog.require_lecture(lecture_id)
        if not lecture.is_quiz or not lecture.questions:
            raise InvalidLectureKindError("Lecture is not a quiz")

        selected = normalize_answers(answers)

        await self.enrollments.ensure_enrolled(principal, lecture.course_id)

        grade = grade_answers(lecture.questions, selected)
        attempt = QuizAttempt(
            user_id=principal.user_id,
            lecture_id=lecture_id,
            course_id=lecture.course_id,
            answers=selected,
            score=grade.score,
            passed=grade.passed,
        )

        batch = BatchStatement()
        batch.add(
            self._insert_attempt,
            [
                attempt.user_id,
                attempt.lecture_id,
                attempt.attempted_at,
                attempt.attempt_id,
                attempt.course_id,
                attempt.answers,
                attempt.score,
                attempt.passed,
            ],
        )
        if grade.passed:
            record = ProgressRecord(
                user_id=principal.user_id,
                course_id=lecture.course_id,
                lecture_id=lecture_id,
                completed=True,
                score=grade.score,
                completed_at=attempt.attempted_at,
            )
            statement, params = self.progress.completion_upsert(record)
            batch.add(statement, params)

        await self.session.aexecute(batch)

        logger.info(
            "quiz_submitted",
            user_id=str(principal.user_id),
            lecture_id=str(lecture_id),
            attempt_id=str(attempt.attempt_id),
            score=grade.score,
            passed=grade.passed,
        )

        return QuizResultResponse(
            attempt_id=attempt.attempt_id,
            lecture_id=lecture_id,
            score=grade.score,
            passed=grade.passed,
            correct_count=grade.correct_count,
            total_questions=grade.total_questions,
            attempted_at=attempt.attempted_at,
        )

    async def get_quiz_attempts(
        self,
        principal: Principal | None,
        lecture_id: UUID | str,
    ) -> list[QuizAttempt]:
        """Get the caller's attempts on a quiz, oldest first.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the lecture does not exist
        """
        principal = require_principal(principal)
        lecture_id = parse_identity(lecture_id, "lecture_id")
        await self.catalog.require_lecture(lecture_id)

        rows = await self.session.aexecute(
            self._get_attempts, [principal.user_id, lecture_id]
        )
        return [QuizAttempt.from_row(row) for row in rows]
