"""Student progress tracking service layer.

Business logic for:
- Reading completion (idempotent, first completion timestamp sticks)
- Course progress aggregation (counts and percentage)
- Linear unlock state for the course outline

Quiz completions are written by the quiz service through
``completion_upsert`` so they can share a batch with the attempt record.
"""

from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from learnpath.auth.schemas import Principal, require_principal
from learnpath.catalog.models import LectureKind
from learnpath.core.exceptions import InvalidLectureKindError, parse_identity

from .aggregator import can_access_lecture, completed_lecture_ids, summarize_course
from .models import ProgressRecord
from .schemas import (
    CourseOutlineResponse,
    CourseProgressResponse,
    LectureOutlineItem,
    ProgressRecordResponse,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from learnpath.catalog.service import CatalogService
    from learnpath.enrollments.service import EnrollmentService

logger = structlog.get_logger(__name__)


class ProgressService:
    """Service for lecture progress and derived course state."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        catalog: "CatalogService",
        enrollments: "EnrollmentService",
    ):
        """Initialize with Cassandra session and collaborating services."""
        self.session = session
        self.keyspace = keyspace
        self.catalog = catalog
        self.enrollments = enrollments
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_record = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lecture_progress
            WHERE user_id = ? AND course_id = ? AND lecture_id = ?
        """)

        self._get_course_records = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lecture_progress
            WHERE user_id = ? AND course_id = ?
        """)

        # Reading completion: first writer wins
        self._insert_record_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lecture_progress
            (user_id, course_id, lecture_id, completed, score, completed_at)
            VALUES (?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        # Passing quiz: overwrite in place
        self._upsert_record = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lecture_progress
            (user_id, course_id, lecture_id, completed, score, completed_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)

    # ==========================================================================
    # Completion
    # ==========================================================================

    async def record_reading_completion(
        self,
        principal: Principal | None,
        lecture_id: UUID | str,
    ) -> ProgressRecord:
        """Mark a reading lecture complete for the caller.

        Precondition handled here: the caller is enrolled in the lecture's
        course (``ensure_enrolled``). Repeated calls return the first record
        unchanged.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the lecture does not exist
            InvalidLectureKindError: If the lecture is not a reading
            ValidationError: If the lecture id is malformed
        """
        principal = require_principal(principal)
        lecture_id = parse_identity(lecture_id, "lecture_id")
        lecture = await self.catalog.require_lecture(lecture_id)
        if not lecture.is_reading:
            raise InvalidLectureKindError("Lecture is not a reading")

        await self.enrollments.ensure_enrolled(principal, lecture.course_id)

        existing = await self.get_record(
            principal.user_id, lecture.course_id, lecture_id
        )
        if existing:
            return existing

        record = ProgressRecord(
            user_id=principal.user_id,
            course_id=lecture.course_id,
            lecture_id=lecture_id,
            completed=True,
        )
        result = await self.session.aexecute(
            self._insert_record_if_absent, self._record_params(record)
        )
        if not result.was_applied:
            # A concurrent completion won; keep its timestamp
            winner = await self.get_record(
                principal.user_id, lecture.course_id, lecture_id
            )
            if winner is None:
                msg = "Progress insert was not applied but no row exists"
                raise RuntimeError(msg)
            return winner

        logger.info(
            "reading_completed",
            user_id=str(principal.user_id),
            course_id=str(lecture.course_id),
            lecture_id=str(lecture_id),
        )

        return record

    def completion_upsert(self, record: ProgressRecord) -> tuple[Any, list[Any]]:
        """Statement and parameters that overwrite a progress record."""
        return self._upsert_record, self._record_params(record)

    @staticmethod
    def _record_params(record: ProgressRecord) -> list[Any]:
        return [
            record.user_id,
            record.course_id,
            record.lecture_id,
            record.completed,
            record.score,
            record.completed_at,
        ]

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_record(
        self,
        user_id: UUID,
        course_id: UUID,
        lecture_id: UUID,
    ) -> ProgressRecord | None:
        """Get the progress record for one lecture."""
        result = await self.session.aexecute(
            self._get_record, [user_id, course_id, lecture_id]
        )
        row = result.one()
        return ProgressRecord.from_row(row) if row else None

    async def get_course_records(
        self,
        user_id: UUID,
        course_id: UUID,
    ) -> list[ProgressRecord]:
        """Get all progress records of a student in a course."""
        rows = await self.session.aexecute(
            self._get_course_records, [user_id, course_id]
        )
        return [ProgressRecord.from_row(row) for row in rows]

    async def get_course_progress(
        self,
        principal: Principal | None,
        course_id: UUID | str,
    ) -> CourseProgressResponse:
        """Aggregate progress of the caller in a course.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the course does not exist
        """
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")
        await self.catalog.require_course(course_id)

        lectures = await self.catalog.list_course_lectures(course_id)
        records = await self.get_course_records(principal.user_id, course_id)
        total, completed, percentage = summarize_course(lectures, records)

        return CourseProgressResponse(
            course_id=course_id,
            total_lectures=total,
            completed_lectures=completed,
            progress_percentage=percentage,
            lectures=[ProgressRecordResponse.from_entity(r) for r in records],
        )

    async def is_lecture_completed(
        self,
        principal: Principal | None,
        lecture_id: UUID | str,
    ) -> bool:
        """Check whether the caller completed a lecture."""
        principal = require_principal(principal)
        lecture_id = parse_identity(lecture_id, "lecture_id")
        lecture = await self.catalog.require_lecture(lecture_id)
        record = await self.get_record(
            principal.user_id, lecture.course_id, lecture_id
        )
        return record is not None and record.completed

    async def can_access_lecture(
        self,
        principal: Principal | None,
        course_id: UUID | str,
        index: int,
    ) -> bool:
        """Apply the linear unlock rule to the lecture at ``index``."""
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")
        lectures = await self.catalog.list_course_lectures(course_id)
        records = await self.get_course_records(principal.user_id, course_id)
        return can_access_lecture(lectures, completed_lecture_ids(records), index)

    async def get_course_outline(
        self,
        principal: Principal | None,
        course_id: UUID | str,
    ) -> CourseOutlineResponse:
        """Ordered lectures with completion and unlock state for the caller.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the course does not exist
        """
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")
        await self.catalog.require_course(course_id)

        lectures = await self.catalog.list_course_lectures(course_id)
        records = await self.get_course_records(principal.user_id, course_id)
        done = completed_lecture_ids(records)

        return CourseOutlineResponse(
            course_id=course_id,
            lectures=[
                LectureOutlineItem(
                    lecture_id=lecture.id,
                    title=lecture.title,
                    kind=LectureKind(lecture.kind),
                    position=lecture.position,
                    completed=lecture.id in done,
                    accessible=can_access_lecture(lectures, done, index),
                )
                for index, lecture in enumerate(lectures)
            ],
        )
