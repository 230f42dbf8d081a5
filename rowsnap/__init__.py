"""
rowsnap

Snapshot testing for relational query results: record what a query
returns, check later runs against the recording, and replay recorded
tables to seed a database.
"""

from rowsnap.errors import SnapshotError
from rowsnap.models import ColType, Query, Result, ResultType, Row, Snapshot
from rowsnap.types import ScanType

__all__ = [
    "SnapshotError",
    "ColType",
    "Query",
    "Result",
    "ResultType",
    "Row",
    "Snapshot",
    "ScanType",
]
__version__ = "0.1.0"
