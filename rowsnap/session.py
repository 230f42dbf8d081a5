"""
Per-test snapshot operations.

SnapshotSession binds a database, a store and a test identifier, and offers
the three things a test does with snapshots: record them, check the live
database against them, and seed the database from them. Which of these a
given test run performs is left to the caller.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from rowsnap.compare.engine import check_snapshot
from rowsnap.db.adapter import Database
from rowsnap.db.statements import StatementBuilder
from rowsnap.models import Query, Snapshot
from rowsnap.scan.scanner import capture_snapshot
from rowsnap.storage.replay import DEFAULT_BATCH_SIZE
from rowsnap.storage.store import SnapshotStore


DEFAULT_INITIAL_NAME = "initial"

logger = logging.getLogger(__name__)


class SnapshotSession:
    """
    Snapshot operations for one test.

    Usage:
        session = SnapshotSession(db, "test_checkout", SnapshotStore())
        session.seed()                                  # load "initial" tables
        ...                                             # exercise the code under test
        orders = Query.table("orders").register_comparator("updated_at", time_after)
        session.check("after_checkout", [orders])
    """

    def __init__(
        self,
        db: Database,
        test_name: str,
        store: Optional[SnapshotStore] = None,
        builder: Optional[StatementBuilder] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.db = db
        self.test_name = test_name
        self.store = store or SnapshotStore()
        self.builder = builder or StatementBuilder()
        self.batch_size = batch_size

    def capture(self, name: str, queries: Sequence[Query]) -> Snapshot:
        """Run queries against the live database without storing anything."""
        return capture_snapshot(self.db, self.test_name, name, queries)

    def record(self, name: str, queries: Sequence[Query], overwrite: bool = False) -> Path:
        """
        Capture and store a snapshot.

        Raises:
            SnapshotExistsError: If it exists and overwrite is False
        """
        snapshot = self.capture(name, queries)
        return self.store.save(snapshot, overwrite=overwrite)

    def record_tables(self, tables: Sequence[str], name: str = DEFAULT_INITIAL_NAME, overwrite: bool = False) -> Path:
        """Record whole tables, by default as the "initial" snapshot."""
        return self.record(name, self._table_queries(tables), overwrite=overwrite)

    def check(self, name: str, queries: Sequence[Query]) -> None:
        """
        Assert the live database still matches a stored snapshot.

        The stored results are bound to the given queries by name, so
        comparators registered on the queries apply.

        Raises:
            SnapshotNotFoundError: If the snapshot was never recorded
            StructuralMismatch: If result lists or column layouts differ
            ValueMismatch: If any row differs
        """
        expect = self.store.load(self.test_name, name).bind_queries(queries)
        actual = self.capture(name, queries)
        check_snapshot(expect, actual)
        logger.info("Snapshot %s/%s matches", self.test_name, expect.name)

    def check_tables(self, tables: Sequence[str], name: str) -> None:
        """Check whole tables against a stored snapshot."""
        self.check(name, self._table_queries(tables))

    def seed(self, name: str = DEFAULT_INITIAL_NAME) -> int:
        """
        Load a stored snapshot and replay its tables into the database.

        Returns:
            Number of rows inserted
        """
        snapshot = self.store.load(self.test_name, name)
        return self.store.apply(snapshot, self.db, builder=self.builder, batch_size=self.batch_size)

    def _table_queries(self, tables: Sequence[str]) -> list[Query]:
        queries = []
        for table in tables:
            sql, _ = self.builder.select(table)
            queries.append(Query.table(table, sql=sql))
        return queries
