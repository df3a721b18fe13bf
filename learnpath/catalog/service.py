"""Course catalog service layer.

Thin data access for courses and lectures. The progress engine depends on
``get_lecture``/``require_lecture`` and ``list_course_lectures``; the create
operations assign lecture positions.
"""

import asyncio
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from cassandra.query import BatchStatement

from learnpath.auth.permissions import is_at_least_instructor
from learnpath.auth.schemas import Principal, require_principal
from learnpath.core.exceptions import (
    LearnPathError,
    NotFoundError,
    PermissionDeniedError,
)

from .models import Course, CourseSummary, Lecture, QuizQuestion, dump_questions
from .schemas import CreateCourseRequest, CreateLectureRequest


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)

# Concurrent lecture creation can race for the same position
MAX_POSITION_ATTEMPTS = 3

# Upper bound on the full course listing
COURSE_LIST_LIMIT = 100


class CatalogService:
    """Service for courses and their ordered lectures."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        position_attempts: int = MAX_POSITION_ATTEMPTS,
    ):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self.position_attempts = position_attempts
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (id, title, description, instructor_id, category, image_url, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses WHERE id = ?
        """)

        self._list_courses = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.courses LIMIT ?
        """)

        self._insert_course_by_instructor = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_instructor
            (instructor_id, created_at, course_id)
            VALUES (?, ?, ?)
        """)

        self._list_instructor_course_ids = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.courses_by_instructor
            WHERE instructor_id = ?
        """)

        self._insert_lecture = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lectures
            (id, course_id, title, kind, position, content, link, file_url,
             file_name, file_type, questions, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_lecture = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lectures WHERE id = ?
        """)

        # Lightweight transaction: one lecture per position
        self._claim_position = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lectures_by_course
            (course_id, position, lecture_id)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)

        self._list_course_positions = self.session.prepare(f"""
            SELECT position, lecture_id FROM {self.keyspace}.lectures_by_course
            WHERE course_id = ?
        """)

        self._count_course_lectures = self.session.prepare(f"""
            SELECT COUNT(*) AS total FROM {self.keyspace}.lectures_by_course
            WHERE course_id = ?
        """)

    # ==========================================================================
    # Courses
    # ==========================================================================

    async def create_course(
        self,
        principal: Principal | None,
        data: CreateCourseRequest,
    ) -> Course:
        """Create a course owned by the calling instructor.

        Raises:
            NotAuthenticatedError: If no principal
            PermissionDeniedError: If caller is not an instructor
        """
        principal = require_principal(principal)
        if not is_at_least_instructor(principal.role):
            raise PermissionDeniedError("Only instructors can create courses")

        course = Course(
            title=data.title,
            description=data.description,
            instructor_id=principal.user_id,
            category=data.category,
            image_url=data.image_url,
        )

        batch = BatchStatement()
        batch.add(
            self._insert_course,
            [
                course.id,
                course.title,
                course.description,
                course.instructor_id,
                course.category,
                course.image_url,
                course.created_at,
            ],
        )
        batch.add(
            self._insert_course_by_instructor,
            [course.instructor_id, course.created_at, course.id],
        )
        await self.session.aexecute(batch)

        logger.info(
            "course_created",
            course_id=str(course.id),
            instructor_id=str(course.instructor_id),
        )

        return course

    async def get_course(self, course_id: UUID) -> Course | None:
        """Get course by ID."""
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def require_course(self, course_id: UUID) -> Course:
        """Get course by ID or raise NotFoundError."""
        course = await self.get_course(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return course

    async def list_courses(
        self, limit: int = COURSE_LIST_LIMIT
    ) -> list[CourseSummary]:
        """All courses with lecture counts, newest first."""
        rows = await self.session.aexecute(self._list_courses, [limit])
        courses = [Course.from_row(row) for row in rows]
        courses.sort(key=lambda course: course.created_at, reverse=True)
        return await self._summarize(courses)

    async def list_instructor_courses(
        self, principal: Principal | None
    ) -> list[CourseSummary]:
        """Courses owned by the calling instructor, newest first.

        Raises:
            NotAuthenticatedError: If no principal
            PermissionDeniedError: If caller is not an instructor
        """
        principal = require_principal(principal)
        if not is_at_least_instructor(principal.role):
            raise PermissionDeniedError("Only instructors own courses")

        rows = await self.session.aexecute(
            self._list_instructor_course_ids, [principal.user_id]
        )
        fetched = await asyncio.gather(
            *(self.get_course(row.course_id) for row in rows)
        )
        return await self._summarize([course for course in fetched if course])

    async def count_course_lectures(self, course_id: UUID) -> int:
        result = await self.session.aexecute(self._count_course_lectures, [course_id])
        row = result.one()
        return row.total if row else 0

    async def _summarize(self, courses: list[Course]) -> list[CourseSummary]:
        counts = await asyncio.gather(
            *(self.count_course_lectures(course.id) for course in courses)
        )
        return [
            CourseSummary(course, count)
            for course, count in zip(courses, counts, strict=True)
        ]

    # ==========================================================================
    # Lectures
    # ==========================================================================

    async def create_lecture(
        self,
        principal: Principal | None,
        course_id: UUID,
        data: CreateLectureRequest,
    ) -> Lecture:
        """Append a lecture to a course.

        The lecture takes position ``existing lecture count + 1``.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the course does not exist
            PermissionDeniedError: If caller does not own the course
        """
        principal = require_principal(principal)
        course = await self.require_course(course_id)
        if course.instructor_id != principal.user_id:
            raise PermissionDeniedError("Not authorized to add lectures to this course")

        questions = (
            [QuizQuestion(**q.model_dump()) for q in data.questions]
            if data.questions
            else None
        )

        lecture = None
        for _ in range(self.position_attempts):
            positions = await self._get_positions(course_id)
            candidate = Lecture(
                course_id=course_id,
                title=data.title,
                kind=data.kind.value,
                position=len(positions) + 1,
                content=data.content,
                link=data.link,
                file_url=data.file_url,
                file_name=data.file_name,
                file_type=data.file_type,
                questions=questions,
            )
            result = await self.session.aexecute(
                self._claim_position,
                [course_id, candidate.position, candidate.id],
            )
            if result.was_applied:
                lecture = candidate
                break

            logger.warning(
                "lecture_position_taken",
                course_id=str(course_id),
                position=candidate.position,
            )

        if lecture is None:
            raise LearnPathError(
                "Could not assign a lecture position", "position_conflict"
            )

        await self.session.aexecute(
            self._insert_lecture,
            [
                lecture.id,
                lecture.course_id,
                lecture.title,
                lecture.kind,
                lecture.position,
                lecture.content,
                lecture.link,
                lecture.file_url,
                lecture.file_name,
                lecture.file_type,
                dump_questions(lecture.questions),
                lecture.created_at,
            ],
        )

        logger.info(
            "lecture_created",
            course_id=str(course_id),
            lecture_id=str(lecture.id),
            kind=lecture.kind,
            position=lecture.position,
        )

        return lecture

    async def get_lecture(self, lecture_id: UUID) -> Lecture | None:
        """Get lecture by ID."""
        result = await self.session.aexecute(self._get_lecture, [lecture_id])
        row = result.one()
        return Lecture.from_row(row) if row else None

    async def require_lecture(self, lecture_id: UUID) -> Lecture:
        """Get lecture by ID or raise NotFoundError."""
        lecture = await self.get_lecture(lecture_id)
        if lecture is None:
            raise NotFoundError("Lecture not found")
        return lecture

    async def list_course_lectures(self, course_id: UUID) -> list[Lecture]:
        """Get all lectures of a course sorted by position."""
        positions = await self._get_positions(course_id)
        fetched = await asyncio.gather(
            *(self.get_lecture(lecture_id) for _, lecture_id in positions)
        )
        lectures = [lecture for lecture in fetched if lecture]
        lectures.sort(key=lambda lecture: lecture.position)
        return lectures

    async def _get_positions(self, course_id: UUID) -> list[tuple[int, UUID]]:
        rows = await self.session.aexecute(self._list_course_positions, [course_id])
        return [(row.position, row.lecture_id) for row in rows]
