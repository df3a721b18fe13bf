"""Quiz grading module.

Provides:
- All-or-nothing per question grading with a fixed passing score
- Append-only attempt history
- Read-time redaction of correct answers for students
"""

from .grading import (
    PASSING_SCORE,
    GradeResult,
    grade_answers,
    redact_lecture_for_viewer,
)
from .models import QUIZ_TABLES_CQL, QuizAttempt


__all__ = [
    "PASSING_SCORE",
    "QUIZ_TABLES_CQL",
    "GradeResult",
    "QuizAttempt",
    "grade_answers",
    "redact_lecture_for_viewer",
]
