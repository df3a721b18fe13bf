"""Tests for CatalogService.

Covers:
- create_course (instructor only)
- create_lecture (owner only, position = count + 1, position races)
- lecture lookups and ordered listing
- course listings with lecture counts
"""

import asyncio
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from learnpath.auth.schemas import Principal
from learnpath.catalog.models import LectureKind, dump_questions
from learnpath.catalog.schemas import CreateCourseRequest, CreateLectureRequest
from learnpath.catalog.service import MAX_POSITION_ATTEMPTS, CatalogService
from learnpath.core.exceptions import (
    LearnPathError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
)


@pytest.fixture(autouse=True)
def _batches(recording_batch):
    return recording_batch


@pytest.fixture
def catalog_service(mock_session) -> CatalogService:
    return CatalogService(session=mock_session, keyspace="test_keyspace")


@pytest.fixture
def course_row(make_row, course_id: UUID, instructor: Principal):
    return make_row(
        id=course_id,
        title="Farmacologia",
        description="",
        instructor_id=instructor.user_id,
        category=None,
        image_url=None,
        created_at=datetime(2026, 1, 1),
    )


@pytest.fixture
def lecture_row(make_row):
    def _make(lecture):
        return make_row(
            id=lecture.id,
            course_id=lecture.course_id,
            title=lecture.title,
            kind=lecture.kind,
            position=lecture.position,
            content=lecture.content,
            link=lecture.link,
            file_url=lecture.file_url,
            file_name=lecture.file_name,
            file_type=lecture.file_type,
            questions=dump_questions(lecture.questions),
            created_at=lecture.created_at,
        )

    return _make


@pytest.fixture
def reading_request() -> CreateLectureRequest:
    return CreateLectureRequest(title="Intro", kind=LectureKind.READING, content="...")


class TestCreateCourse:
    """Tests for create_course."""

    @pytest.mark.asyncio
    async def test_instructor_creates_course(
        self, catalog_service, mock_session, instructor
    ):
        course = await catalog_service.create_course(
            instructor, CreateCourseRequest(title="Farmacologia")
        )

        assert course.instructor_id == instructor.user_id
        assert course.title == "Farmacologia"
        mock_session.aexecute.assert_awaited_once()

        # Course row and instructor listing row land together
        batch = mock_session.aexecute.await_args.args[0]
        (course_stmt, _), (listing_stmt, listing_params) = batch.entries
        assert ".courses\n" in course_stmt.cql
        assert "courses_by_instructor" in listing_stmt.cql
        assert listing_params == [instructor.user_id, course.created_at, course.id]

    @pytest.mark.asyncio
    async def test_student_is_denied(self, catalog_service, mock_session, student):
        with pytest.raises(PermissionDeniedError):
            await catalog_service.create_course(
                student, CreateCourseRequest(title="Farmacologia")
            )
        mock_session.aexecute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_is_rejected(self, catalog_service):
        with pytest.raises(NotAuthenticatedError):
            await catalog_service.create_course(
                None, CreateCourseRequest(title="Farmacologia")
            )


class TestCreateLecture:
    """Tests for create_lecture."""

    @pytest.mark.asyncio
    async def test_position_is_count_plus_one(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_row,
        course_row,
        course_id,
        instructor,
        reading_request,
    ):
        existing = [
            make_row(position=1, lecture_id=uuid4()),
            make_row(position=2, lecture_id=uuid4()),
        ]
        mock_session.aexecute.side_effect = [
            make_result([course_row]),
            make_result(existing),
            make_result(applied=True),
            make_result(),
        ]

        lecture = await catalog_service.create_lecture(
            instructor, course_id, reading_request
        )

        assert lecture.position == 3
        assert lecture.course_id == course_id
        assert lecture.kind == "reading"
        claim_params = mock_session.aexecute.await_args_list[2].args[1]
        assert claim_params == [course_id, 3, lecture.id]

    @pytest.mark.asyncio
    async def test_first_lecture_gets_position_one(
        self,
        catalog_service,
        mock_session,
        make_result,
        course_row,
        course_id,
        instructor,
        reading_request,
    ):
        mock_session.aexecute.side_effect = [
            make_result([course_row]),
            make_result([]),
            make_result(applied=True),
            make_result(),
        ]

        lecture = await catalog_service.create_lecture(
            instructor, course_id, reading_request
        )

        assert lecture.position == 1

    @pytest.mark.asyncio
    async def test_retries_when_position_taken(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_row,
        course_row,
        course_id,
        instructor,
        reading_request,
    ):
        """A concurrent insert took position 1; the next read sees it."""
        taken = make_row(position=1, lecture_id=uuid4())
        mock_session.aexecute.side_effect = [
            make_result([course_row]),
            make_result([]),
            make_result(applied=False),
            make_result([taken]),
            make_result(applied=True),
            make_result(),
        ]

        lecture = await catalog_service.create_lecture(
            instructor, course_id, reading_request
        )

        assert lecture.position == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(
        self,
        catalog_service,
        mock_session,
        make_result,
        course_row,
        course_id,
        instructor,
        reading_request,
    ):
        attempts = []
        for _ in range(MAX_POSITION_ATTEMPTS):
            attempts += [make_result([]), make_result(applied=False)]
        mock_session.aexecute.side_effect = [make_result([course_row]), *attempts]

        with pytest.raises(LearnPathError) as exc_info:
            await catalog_service.create_lecture(instructor, course_id, reading_request)

        assert exc_info.value.code == "position_conflict"

    @pytest.mark.asyncio
    async def test_configured_attempt_limit(
        self,
        mock_session,
        make_result,
        course_row,
        course_id,
        instructor,
        reading_request,
    ):
        service = CatalogService(
            session=mock_session, keyspace="test_keyspace", position_attempts=1
        )
        mock_session.aexecute.side_effect = [
            make_result([course_row]),
            make_result([]),
            make_result(applied=False),
        ]

        with pytest.raises(LearnPathError) as exc_info:
            await service.create_lecture(instructor, course_id, reading_request)

        assert exc_info.value.code == "position_conflict"
        assert mock_session.aexecute.await_count == 3

    @pytest.mark.asyncio
    async def test_only_owner_can_add(
        self,
        catalog_service,
        mock_session,
        make_result,
        course_row,
        course_id,
        reading_request,
    ):
        other = Principal(user_id=uuid4(), role="instructor")
        mock_session.aexecute.return_value = make_result([course_row])

        with pytest.raises(PermissionDeniedError):
            await catalog_service.create_lecture(other, course_id, reading_request)

    @pytest.mark.asyncio
    async def test_missing_course(
        self, catalog_service, mock_session, make_result, instructor, reading_request
    ):
        mock_session.aexecute.return_value = make_result([])

        with pytest.raises(NotFoundError):
            await catalog_service.create_lecture(instructor, uuid4(), reading_request)


class TestLectureLookups:
    """Tests for get_lecture / require_lecture / list_course_lectures."""

    @pytest.mark.asyncio
    async def test_quiz_questions_round_trip_from_row(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_lecture,
        make_questions,
        lecture_row,
    ):
        quiz = make_lecture(kind=LectureKind.QUIZ, questions=make_questions([1, 0]))
        mock_session.aexecute.return_value = make_result([lecture_row(quiz)])

        loaded = await catalog_service.require_lecture(quiz.id)

        assert loaded.is_quiz
        assert [q.correct_option for q in loaded.questions] == [1, 0]
        assert loaded.created_at.tzinfo is UTC

    @pytest.mark.asyncio
    async def test_require_lecture_not_found(
        self, catalog_service, mock_session, make_result
    ):
        mock_session.aexecute.return_value = make_result([])

        assert await catalog_service.get_lecture(uuid4()) is None
        with pytest.raises(NotFoundError):
            await catalog_service.require_lecture(uuid4())

    @pytest.mark.asyncio
    async def test_list_sorted_by_position(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_row,
        make_lecture,
        lecture_row,
        course_id,
    ):
        first = make_lecture(position=1)
        second = make_lecture(position=2)
        mock_session.aexecute.side_effect = [
            make_result(
                [
                    make_row(position=2, lecture_id=second.id),
                    make_row(position=1, lecture_id=first.id),
                ]
            ),
            make_result([lecture_row(second)]),
            make_result([lecture_row(first)]),
        ]

        lectures = await catalog_service.list_course_lectures(course_id)

        assert [lec.id for lec in lectures] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_lectures_fetched_concurrently(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_row,
        make_lecture,
        lecture_row,
        course_id,
    ):
        created = [make_lecture(position=p) for p in (1, 2, 3)]
        lectures = {lec.id: lec for lec in created}
        positions = [
            make_row(position=lec.position, lecture_id=lec.id) for lec in created
        ]
        in_flight = peak = 0

        async def execute(statement, params):
            nonlocal in_flight, peak
            if "lectures_by_course" in statement.cql:
                return make_result(positions)
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return make_result([lecture_row(lectures[params[0]])])

        mock_session.aexecute.side_effect = execute

        result = await catalog_service.list_course_lectures(course_id)

        assert [lec.position for lec in result] == [1, 2, 3]
        assert peak == 3


class TestCourseListings:
    """Tests for list_courses / list_instructor_courses."""

    @pytest.fixture
    def course_rows(self, make_row, instructor):
        def _make(*days):
            return [
                make_row(
                    id=uuid4(),
                    title=f"Course {day}",
                    description="",
                    instructor_id=instructor.user_id,
                    category=None,
                    image_url=None,
                    created_at=datetime(2026, 1, day),
                )
                for day in days
            ]

        return _make

    @pytest.mark.asyncio
    async def test_newest_first_with_lecture_counts(
        self, catalog_service, mock_session, make_result, make_row, course_rows
    ):
        rows = course_rows(3, 10, 7)
        lecture_counts = {rows[0].id: 1, rows[1].id: 0, rows[2].id: 4}

        async def execute(statement, params):
            if "COUNT(*)" in statement.cql:
                return make_result([make_row(total=lecture_counts[params[0]])])
            return make_result(rows)

        mock_session.aexecute.side_effect = execute

        summaries = await catalog_service.list_courses()

        assert [s.course.created_at.day for s in summaries] == [10, 7, 3]
        assert [s.lecture_count for s in summaries] == [0, 4, 1]

    @pytest.mark.asyncio
    async def test_instructor_courses(
        self,
        catalog_service,
        mock_session,
        make_result,
        make_row,
        course_rows,
        instructor,
    ):
        rows = course_rows(9, 2)
        by_id = {row.id: row for row in rows}

        async def execute(statement, params):
            if "courses_by_instructor" in statement.cql:
                assert params == [instructor.user_id]
                return make_result([make_row(course_id=row.id) for row in rows])
            if "COUNT(*)" in statement.cql:
                return make_result([make_row(total=2)])
            return make_result([by_id[params[0]]])

        mock_session.aexecute.side_effect = execute

        summaries = await catalog_service.list_instructor_courses(instructor)

        assert [s.course.id for s in summaries] == [row.id for row in rows]
        assert all(s.lecture_count == 2 for s in summaries)

    @pytest.mark.asyncio
    async def test_students_have_no_course_list(
        self, catalog_service, mock_session, student
    ):
        with pytest.raises(PermissionDeniedError):
            await catalog_service.list_instructor_courses(student)
        mock_session.aexecute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, catalog_service):
        with pytest.raises(NotAuthenticatedError):
            await catalog_service.list_instructor_courses(None)
