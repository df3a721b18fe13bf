"""Derived progress state.

Pure functions over the ordered lecture list and a student's progress
records. Nothing computed here is persisted; unlock state is recomputed on
every read.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from learnpath.catalog.models import Lecture

from .models import ProgressRecord


def round_percentage(part: int, whole: int) -> int:
    """``round(100 * part / whole)`` with half-up rounding; 0 when whole is 0.

    >>> round_percentage(2, 3)
    67
    >>> round_percentage(1, 8)
    13
    """
    if whole <= 0:
        return 0
    ratio = Decimal(100 * part) / Decimal(whole)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def completed_lecture_ids(records: Iterable[ProgressRecord]) -> set[UUID]:
    """IDs of lectures with a completed record."""
    return {record.lecture_id for record in records if record.completed}


def is_lecture_completed(records: Iterable[ProgressRecord], lecture_id: UUID) -> bool:
    """True iff a completed record exists for the lecture."""
    return lecture_id in completed_lecture_ids(records)


def can_access_lecture(
    lectures: Sequence[Lecture],
    completed_ids: set[UUID],
    index: int,
) -> bool:
    """Strict linear unlock rule.

    Args:
        lectures: Course lectures sorted by position
        completed_ids: Lectures the student has completed
        index: 0-based index into ``lectures``

    Returns:
        True for index 0; for k > 0, True iff lecture k-1 is completed.
        Out of range indexes are never accessible.
    """
    if index < 0 or index >= len(lectures):
        return False
    if index == 0:
        return True
    return lectures[index - 1].id in completed_ids


def summarize_course(
    lectures: Sequence[Lecture],
    records: Sequence[ProgressRecord],
) -> tuple[int, int, int]:
    """Compute (total, completed, percentage) for a course.

    Only records for lectures currently in the course are counted.
    """
    lecture_ids = {lecture.id for lecture in lectures}
    completed = len(completed_lecture_ids(records) & lecture_ids)
    total = len(lectures)
    return total, completed, round_percentage(completed, total)
