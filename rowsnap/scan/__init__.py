"""
Scan module for rowsnap.

This module provides conversion of live query cursors into typed Results
and capture of whole snapshots from queries.
"""

from rowsnap.scan.scanner import capture_snapshot, fetch_table, run_query, scan

__all__ = [
    "capture_snapshot",
    "fetch_table",
    "run_query",
    "scan",
]
