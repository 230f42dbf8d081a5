"""
Test fixtures for rowsnap.

This module provides an in-memory database double and sample column
layouts and results for testing the snapshot engine.
"""

from datetime import datetime, timezone

from rowsnap.models import ColType, Query, Result, ResultType, Snapshot
from rowsnap.types import ColumnDescriptor, ScanType


class FakeCursor:
    """RowCursor over canned descriptors and rows."""

    def __init__(self, descriptors, rows):
        self.descriptors = list(descriptors)
        self.rows = [tuple(r) for r in rows]
        self.closed = False

    def columns(self):
        return self.descriptors

    def __iter__(self):
        return iter(self.rows)

    def close(self):
        self.closed = True


class FakeDatabase:
    """
    Database double.

    Queries are answered from a dict of SQL text to (descriptors, rows).
    Every exec call is recorded; a statement starting with fail_on raises.
    """

    def __init__(self, tables=None, fail_on=None):
        self.tables = dict(tables or {})
        self.fail_on = fail_on
        self.queries = []
        self.statements = []
        self.cursors = []

    def execute(self, query, args=()):
        self.queries.append((query, tuple(args)))
        if query not in self.tables:
            raise RuntimeError(f"no such table for: {query}")
        descriptors, rows = self.tables[query]
        cursor = FakeCursor(descriptors, rows)
        self.cursors.append(cursor)
        return cursor

    def exec(self, statement, args=()):
        if self.fail_on and statement.startswith(self.fail_on):
            raise RuntimeError("disk full")
        self.statements.append((statement, list(args)))
        return 1


# Column descriptors as a driver would report them
ORDER_DESCRIPTORS = [
    ColumnDescriptor(name="id", database_type="BIGINT", nullable=False,
                     default_scan_type=ScanType.INT64),
    ColumnDescriptor(name="item", database_type="VARCHAR", full_database_type="varchar(64)",
                     nullable=False, length=64),
    ColumnDescriptor(name="price", database_type="DECIMAL", nullable=True,
                     precision=10, scale=2),
    ColumnDescriptor(name="updated_at", database_type="DATETIME", nullable=False),
]

ORDER_ROWS = [
    (1, "widget", "9.99", datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
    (2, "gadget", None, datetime(2024, 1, 3, 0, 0, 0, tzinfo=timezone.utc)),
]

ORDER_SQL = 'SELECT * FROM "orders"'

USER_DESCRIPTORS = [
    ColumnDescriptor(name="id", database_type="INT", nullable=False,
                     default_scan_type="int32"),
    ColumnDescriptor(name="name", database_type="VARCHAR", nullable=False),
]

USER_ROWS = [(1, "ada"), (2, "grace")]

USER_SQL = 'SELECT * FROM "users"'


def make_col(name, scan_type, database_type="", nullable=False):
    """Build a ColType with only the fields comparisons look at."""
    return ColType(
        name=name,
        database_type=database_type or scan_type.tag.upper(),
        scan_type=scan_type,
        nullable=nullable,
        has_nullable=True,
    )


def make_result(name, cols, rows, is_table=False, query=None):
    """Build a Result from ColTypes and row tuples."""
    return Result(
        result_type=ResultType(name=name, is_table=is_table, col_types=tuple(cols)),
        rows=[tuple(r) for r in rows],
        query=query,
    )


def users_result(rows=None):
    """A two-column users table result."""
    cols = [make_col("id", ScanType.INT32, "INT"), make_col("name", ScanType.STRING, "VARCHAR")]
    return make_result("users", cols, USER_ROWS if rows is None else rows, is_table=True)


def events_result(rows=None):
    """A result with a timestamp column, which needs a comparator."""
    cols = [make_col("id", ScanType.INT64, "BIGINT"), make_col("at", ScanType.TIMESTAMP, "DATETIME")]
    default_rows = [(1, datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))]
    return make_result("events", cols, default_rows if rows is None else rows)


def fake_shop():
    """FakeDatabase with orders and users tables."""
    return FakeDatabase({
        ORDER_SQL: (ORDER_DESCRIPTORS, ORDER_ROWS),
        USER_SQL: (USER_DESCRIPTORS, USER_ROWS),
    })


def sample_snapshot(name="initial", test_name="tests/test_shop.py::test_checkout"):
    """Snapshot with a table result and a query result."""
    count = make_result("user_count", [make_col("n", ScanType.INT64, "BIGINT")], [(2,)],
                        query=Query(name="user_count", sql="SELECT COUNT(*) AS n FROM users"))
    return Snapshot(name=name, test_name=test_name, results=(users_result(), count))
