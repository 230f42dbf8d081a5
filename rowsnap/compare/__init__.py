"""
Comparison module for rowsnap.

This module provides structural and value-level comparison of Results and
Snapshots, plus the built-in per-column comparators.
"""

from rowsnap.compare.comparators import (
    default_comparators,
    exact_equal,
    raw_bytes_equal,
    time_after,
    time_equal,
)
from rowsnap.compare.engine import (
    check_result,
    check_snapshot,
    compare_col_type,
    compare_result,
    compare_result_type,
    compare_row,
    compare_snapshot,
)

__all__ = [
    "default_comparators",
    "exact_equal",
    "raw_bytes_equal",
    "time_after",
    "time_equal",
    "check_result",
    "check_snapshot",
    "compare_col_type",
    "compare_result",
    "compare_result_type",
    "compare_row",
    "compare_snapshot",
]
