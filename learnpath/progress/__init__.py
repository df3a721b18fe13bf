"""Student progress tracking module.

Provides:
- Reading completion (idempotent)
- Course progress aggregation with half-up rounded percentage
- Linear unlock state for course outlines
"""

from .models import PROGRESS_TABLES_CQL, ProgressRecord


__all__ = [
    "PROGRESS_TABLES_CQL",
    "ProgressRecord",
]
