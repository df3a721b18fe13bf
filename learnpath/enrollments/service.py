"""Enrollment ledger service layer.

Business logic for:
- Idempotent auto-enrollment on content access (``ensure_enrolled``)
- Explicit enrollment that rejects duplicates (``enroll``)
- Enrollment lookups per student and per course, and the course roster

Both write paths go through a lightweight transaction on the
course-partitioned table, so concurrent requests can never create two
enrollments for the same (student, course) pair.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from learnpath.auth.permissions import UserRole, has_permission
from learnpath.auth.schemas import Principal, require_principal
from learnpath.core.exceptions import (
    AlreadyEnrolledError,
    PermissionDeniedError,
    parse_identity,
)

from .models import Enrollment


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from learnpath.catalog.service import CatalogService

logger = structlog.get_logger(__name__)


class EnrollmentService:
    """Service for the enrollment ledger."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        catalog: "CatalogService",
    ):
        """Initialize with Cassandra session and the course catalog."""
        self.session = session
        self.keyspace = keyspace
        self.catalog = catalog
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE course_id = ? AND user_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (course_id, user_id, enrolled_at)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)

        self._upsert_enrollment_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_user
            (user_id, course_id, enrolled_at)
            VALUES (?, ?, ?)
        """)

        self._get_course_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE course_id = ?
        """)

        self._get_user_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments_by_user
            WHERE user_id = ?
        """)

        self._count_course_enrollments = self.session.prepare(f"""
            SELECT COUNT(*) AS total FROM {self.keyspace}.enrollments
            WHERE course_id = ?
        """)

    # ==========================================================================
    # Write Paths
    # ==========================================================================

    async def ensure_enrolled(
        self,
        principal: Principal | None,
        course_id: UUID | str,
    ) -> Enrollment:
        """Enroll the caller unless already enrolled.

        Called as the first step of every content-access operation. Safe to
        call repeatedly: only the first call creates the ledger row; later
        calls rewrite the per-user lookup row with the stored ``enrolled_at``.

        Returns:
            The existing enrollment unchanged, or the newly created one

        Raises:
            NotAuthenticatedError: If no principal
        """
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")

        existing = await self.get_enrollment(principal.user_id, course_id)
        if existing:
            await self._write_user_lookup(existing)
            return existing

        created = await self._insert_if_absent(principal.user_id, course_id)
        if created:
            logger.info(
                "user_auto_enrolled",
                user_id=str(principal.user_id),
                course_id=str(course_id),
            )
            return created

        # Lost a race with a concurrent request; its row is authoritative
        winner = await self.get_enrollment(principal.user_id, course_id)
        if winner is None:
            msg = "Enrollment insert was not applied but no row exists"
            raise RuntimeError(msg)
        await self._write_user_lookup(winner)
        return winner

    async def enroll(
        self,
        principal: Principal | None,
        course_id: UUID | str,
    ) -> Enrollment:
        """Explicitly enroll the caller in a course.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the course does not exist
            AlreadyEnrolledError: If an enrollment already exists
        """
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")
        await self.catalog.require_course(course_id)

        existing = await self.get_enrollment(principal.user_id, course_id)
        if existing:
            await self._write_user_lookup(existing)
            raise AlreadyEnrolledError

        enrollment = await self._insert_if_absent(principal.user_id, course_id)
        if enrollment is None:
            raise AlreadyEnrolledError

        logger.info(
            "user_enrolled",
            user_id=str(principal.user_id),
            course_id=str(course_id),
        )

        return enrollment

    async def _insert_if_absent(
        self,
        user_id: UUID,
        course_id: UUID,
    ) -> Enrollment | None:
        """Insert an enrollment unless one exists.

        Returns:
            The new enrollment, or None if the row already existed
        """
        enrollment = Enrollment(course_id=course_id, user_id=user_id)

        result = await self.session.aexecute(
            self._insert_enrollment,
            [enrollment.course_id, enrollment.user_id, enrollment.enrolled_at],
        )
        if not result.was_applied:
            return None

        await self._write_user_lookup(enrollment)
        return enrollment

    async def _write_user_lookup(self, enrollment: Enrollment) -> None:
        """Upsert the per-user lookup row from the ledger row.

        Idempotent. Every path that finds a ledger row calls this, which
        restores a lookup row lost to a failed write.
        """
        await self.session.aexecute(
            self._upsert_enrollment_by_user,
            [enrollment.user_id, enrollment.course_id, enrollment.enrolled_at],
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_enrollment(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        """Get enrollment by user and course."""
        result = await self.session.aexecute(self._get_enrollment, [course_id, user_id])
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def is_enrolled(self, principal: Principal | None, course_id: UUID) -> bool:
        """Check whether the caller is enrolled in a course.

        Anonymous callers are never enrolled.
        """
        if principal is None:
            return False
        return await self.get_enrollment(principal.user_id, course_id) is not None

    async def list_enrollments_for_student(self, user_id: UUID) -> list[Enrollment]:
        """Get all enrollments of a student (unordered)."""
        rows = await self.session.aexecute(self._get_user_enrollments, [user_id])
        return [Enrollment.from_row(row) for row in rows]

    async def list_enrollments_for_course(self, course_id: UUID) -> list[Enrollment]:
        """Get all enrollments of a course (unordered)."""
        rows = await self.session.aexecute(self._get_course_enrollments, [course_id])
        return [Enrollment.from_row(row) for row in rows]

    async def list_course_roster(
        self, principal: Principal | None, course_id: UUID | str
    ) -> list[Enrollment]:
        """Enrollments of a course, visible to its instructor and to admins.

        Raises:
            NotAuthenticatedError: If no principal
            NotFoundError: If the course does not exist
            PermissionDeniedError: If caller neither owns the course nor is admin
        """
        principal = require_principal(principal)
        course_id = parse_identity(course_id, "course_id")
        course = await self.catalog.require_course(course_id)
        if course.instructor_id != principal.user_id and not has_permission(
            principal.role, UserRole.ADMIN
        ):
            raise PermissionDeniedError("Not authorized to view this course roster")
        return await self.list_enrollments_for_course(course_id)

    async def count_course_enrollments(self, course_id: UUID) -> int:
        """Count students enrolled in a course."""
        result = await self.session.aexecute(
            self._count_course_enrollments, [course_id]
        )
        row = result.one()
        return row.total if row else 0
