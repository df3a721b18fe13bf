"""Enrollment ledger module.

Provides:
- Idempotent auto-enrollment on content access
- Explicit enrollment (duplicates rejected)
- Per-student and per-course enrollment lookups
"""

from .models import ENROLLMENTS_TABLES_CQL, Enrollment


__all__ = [
    "ENROLLMENTS_TABLES_CQL",
    "Enrollment",
]
