"""Course catalog module.

Courses and their ordered lectures (reading or quiz). Read by the
enrollment, progress and quiz modules.
"""

from .models import (
    CATALOG_TABLES_CQL,
    Course,
    CourseSummary,
    Lecture,
    LectureKind,
    QuizQuestion,
)


__all__ = [
    "CATALOG_TABLES_CQL",
    "Course",
    "CourseSummary",
    "Lecture",
    "LectureKind",
    "QuizQuestion",
]
