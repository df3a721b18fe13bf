"""Quiz grading and read-time answer redaction.

Grading is all-or-nothing per question: an answer is correct only when it
equals the stored ``correct_option``. There is no partial credit.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from learnpath.auth.permissions import UserRole, is_student
from learnpath.catalog.models import Lecture, QuizQuestion
from learnpath.core.exceptions import ValidationError
from learnpath.progress.aggregator import round_percentage


# Fixed threshold, not configurable per course
PASSING_SCORE = 70


@dataclass(frozen=True)
class GradeResult:
    """Outcome of grading one submission."""

    score: int
    passed: bool
    correct_count: int
    total_questions: int


def normalize_answers(answers: Sequence[Any]) -> list[int]:
    """Validate submitted answers.

    Each entry must be an integer option index. A shorter or longer list is
    not an error here; grading pads and truncates.

    Raises:
        ValidationError: If an entry is not an integer
    """
    normalized = []
    for position, answer in enumerate(answers):
        # bool is an int subclass but never a valid option index
        if isinstance(answer, bool) or not isinstance(answer, int):
            raise ValidationError(f"Answer {position} must be an integer")
        normalized.append(answer)
    return normalized


def grade_answers(
    questions: Sequence[QuizQuestion],
    answers: Sequence[int],
) -> GradeResult:
    """Grade answers against the stored questions.

    Question ``i`` is correct iff ``answers[i] == questions[i].correct_option``.
    Missing answers count as incorrect; answers beyond the last question are
    ignored.

    Example:
        >>> qs = [QuizQuestion(question="q", options=["a", "b"], correct_option=0)] * 3
        >>> grade_answers(qs, [0, 0, 1])
        GradeResult(score=67, passed=False, correct_count=2, total_questions=3)
    """
    total = len(questions)
    correct = sum(
        1
        for index, question in enumerate(questions)
        if index < len(answers) and answers[index] == question.correct_option
    )
    score = round_percentage(correct, total)
    return GradeResult(
        score=score,
        passed=score >= PASSING_SCORE,
        correct_count=correct,
        total_questions=total,
    )


def redact_lecture_for_viewer(lecture: Lecture, role: UserRole | None) -> Lecture:
    """Hide correct answers from students.

    Returns a copy with every ``correct_option`` set to None when the viewer
    is a student (or anonymous). Other roles get the stored lecture as is.
    """
    if not lecture.questions:
        return lecture
    if role is not None and not is_student(role):
        return lecture
    return lecture.copy_with_questions(
        [q.model_copy(update={"correct_option": None}) for q in lecture.questions]
    )
