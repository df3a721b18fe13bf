"""Tests for quiz grading and answer redaction."""

import pytest

from learnpath.auth.permissions import UserRole
from learnpath.catalog.models import LectureKind
from learnpath.core.exceptions import ValidationError
from learnpath.quizzes.grading import (
    PASSING_SCORE,
    GradeResult,
    grade_answers,
    normalize_answers,
    redact_lecture_for_viewer,
)


class TestGradeAnswers:
    """Tests for grade_answers."""

    def test_all_correct(self, make_questions) -> None:
        questions = make_questions([0, 1])
        assert grade_answers(questions, [0, 1]) == GradeResult(
            score=100, passed=True, correct_count=2, total_questions=2
        )

    def test_all_wrong(self, make_questions) -> None:
        questions = make_questions([0, 1, 2])
        result = grade_answers(questions, [3, 3, 3])
        assert result.score == 0
        assert result.passed is False
        assert result.correct_count == 0

    def test_two_of_three_fails(self, make_questions) -> None:
        """round(66.67) = 67, below the passing score."""
        result = grade_answers(make_questions([0, 0, 0]), [0, 0, 1])
        assert result.score == 67
        assert result.passed is False

    def test_three_of_four_passes(self, make_questions) -> None:
        result = grade_answers(make_questions([0, 1, 2, 3]), [0, 1, 2, 0])
        assert result.score == 75
        assert result.passed is True

    def test_one_of_eight_rounds_half_up(self, make_questions) -> None:
        result = grade_answers(make_questions([0] * 8), [0, 1, 1, 1, 1, 1, 1, 1])
        assert result.score == 13

    def test_exact_threshold_passes(self, make_questions) -> None:
        result = grade_answers(make_questions([0] * 10), [0] * 7 + [1] * 3)
        assert result.score == PASSING_SCORE
        assert result.passed is True

    def test_missing_answers_are_incorrect(self, make_questions) -> None:
        result = grade_answers(make_questions([0, 1, 2]), [0])
        assert result.correct_count == 1
        assert result.total_questions == 3
        assert result.score == 33

    def test_empty_answers(self, make_questions) -> None:
        result = grade_answers(make_questions([0, 1]), [])
        assert result.correct_count == 0
        assert result.passed is False

    def test_extra_answers_ignored(self, make_questions) -> None:
        result = grade_answers(make_questions([2]), [2, 0, 1])
        assert result == GradeResult(
            score=100, passed=True, correct_count=1, total_questions=1
        )


class TestNormalizeAnswers:
    """Tests for answer validation."""

    def test_integers_pass_through(self) -> None:
        assert normalize_answers((0, 3, 1)) == [0, 3, 1]

    @pytest.mark.parametrize("bad", [["0"], [1.0], [None], [True]])
    def test_non_integer_rejected(self, bad: list) -> None:
        with pytest.raises(ValidationError):
            normalize_answers(bad)


class TestRedactLectureForViewer:
    """Read-time redaction of correct answers."""

    @pytest.fixture
    def quiz(self, make_lecture, make_questions):
        return make_lecture(kind=LectureKind.QUIZ, questions=make_questions([1, 2]))

    def test_student_sees_no_correct_option(self, quiz) -> None:
        redacted = redact_lecture_for_viewer(quiz, UserRole.STUDENT)

        assert all(q.correct_option is None for q in redacted.questions)
        assert [q.question for q in redacted.questions] == [
            q.question for q in quiz.questions
        ]
        assert [q.options for q in redacted.questions] == [
            q.options for q in quiz.questions
        ]

    def test_stored_lecture_not_modified(self, quiz) -> None:
        redact_lecture_for_viewer(quiz, UserRole.STUDENT)
        assert [q.correct_option for q in quiz.questions] == [1, 2]

    @pytest.mark.parametrize("role", [UserRole.INSTRUCTOR, UserRole.ADMIN])
    def test_other_roles_see_answers(self, quiz, role: UserRole) -> None:
        assert redact_lecture_for_viewer(quiz, role) is quiz

    def test_reading_unchanged(self, make_lecture) -> None:
        reading = make_lecture(content="text")
        assert redact_lecture_for_viewer(reading, UserRole.STUDENT) is reading
