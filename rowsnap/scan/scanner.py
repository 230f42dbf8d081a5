"""
Result Scanning for rowsnap

This module turns a live query cursor into a typed Result, and captures
whole snapshots from a list of queries.

Key Components:
    - scan: generic cursor-to-Result conversion
    - run_query: execute one Query and scan its output
    - fetch_table: capture every row of a table
    - capture_snapshot: run several queries into one Snapshot

Design Decisions:
    - Column metadata is resolved once per cursor; every value is then
      decoded by its column's scan type handler
    - Cursor order is kept exactly; comparison downstream is positional
    - Driver failures become QueryError, decode failures become ScanError,
      each naming the statement or column involved

Representation:
    Input: a Database collaborator and statements to run
    Transformation: column resolution, per-cell decoding
    Output: Result objects with canonical values
    Limitation: the whole result set is held in memory
"""

import logging
from typing import Any, Optional, Sequence

from rowsnap.db.adapter import Database, RowCursor
from rowsnap.db.statements import StatementBuilder
from rowsnap.errors import QueryError, ScanError, SnapshotError
from rowsnap.models import ColType, Query, Result, ResultType, Snapshot
from rowsnap.naming import clean_name
from rowsnap.types.resolver import resolve_col_type
from rowsnap.types.scan_types import ValueHandler


logger = logging.getLogger(__name__)


def scan(cursor: RowCursor, statement: Optional[str] = None) -> Result:
    """
    Read every row of a cursor into a Result.

    The Result is unnamed and not flagged as a table; callers that know
    where the rows came from rename it. The cursor is left open.

    Args:
        cursor: Row cursor from the database collaborator
        statement: Statement that produced the cursor, for error reports

    Returns:
        Result with resolved column types and decoded rows

    Raises:
        ScanError: If column metadata cannot be read or a value cannot be decoded
        UnsupportedTypeError: If a column has no usable scan type
        QueryError: If the driver fails while fetching rows
    """
    try:
        descriptors = cursor.columns()
    except SnapshotError:
        raise
    except Exception as e:
        raise ScanError(f"cannot read column metadata: {e}") from e

    col_types = tuple(resolve_col_type(d) for d in descriptors)
    handlers = [c.scan_type.handler for c in col_types]

    rows = []
    try:
        for i, raw in enumerate(cursor):
            rows.append(_decode_row(i, raw, col_types, handlers))
    except SnapshotError:
        raise
    except Exception as e:
        raise QueryError(f"cannot fetch rows: {e}", statement=statement) from e

    return Result(result_type=ResultType(col_types=col_types), rows=rows)


def _decode_row(
    i: int,
    raw: Sequence[Any],
    col_types: Sequence[ColType],
    handlers: Sequence[ValueHandler],
) -> tuple[Any, ...]:
    if len(raw) != len(col_types):
        raise ScanError(
            f"row {i} has {len(raw)} values, expected {len(col_types)}",
            row=i,
        )

    values = []
    for col, handler, cell in zip(col_types, handlers, raw):
        try:
            values.append(handler.decode(cell))
        except (TypeError, ValueError) as e:
            raise ScanError(
                f"row {i}, column {col.name!r} ({col.scan_type.tag}): {e}",
                column=col.name,
                row=i,
            ) from e
    return tuple(values)


def run_query(db: Database, query: Query) -> Result:
    """
    Execute a Query and scan its output.

    The cursor is closed once its rows are read, also when reading fails.

    Args:
        db: Database collaborator
        query: The query to run

    Returns:
        Result named after the query, bound to it (and its comparators)

    Raises:
        QueryError: If the database rejects the statement or fails mid-fetch
    """
    try:
        cursor = db.execute(query.sql, query.args)
    except Exception as e:
        raise QueryError(f"query {query.name!r} failed: {e}", statement=query.sql) from e

    try:
        result = scan(cursor, statement=query.sql)
    finally:
        cursor.close()

    logger.debug("Scanned %d rows for %s", len(result), query.name)
    return result.renamed(query.name, is_table=query.is_table).with_query(query)


def fetch_table(
    db: Database,
    table: str,
    builder: Optional[StatementBuilder] = None,
) -> Result:
    """
    Capture every row of a table.

    Args:
        db: Database collaborator
        table: Table name
        builder: Statement builder for the target dialect

    Returns:
        Result named after the table and flagged as a table
    """
    builder = builder or StatementBuilder()
    sql, args = builder.select(table)
    return run_query(db, Query(name=table, sql=sql, args=tuple(args), is_table=True))


def capture_snapshot(
    db: Database,
    test_name: str,
    name: str,
    queries: Sequence[Query],
) -> Snapshot:
    """
    Run queries in order and collect their Results into a Snapshot.

    Args:
        db: Database collaborator
        test_name: Identifier of the owning test
        name: Snapshot name (validated and lower-cased)
        queries: Queries whose results make up the snapshot

    Returns:
        Snapshot holding one Result per query, in query order
    """
    name = clean_name(name)
    results = tuple(run_query(db, q) for q in queries)
    logger.info("Captured snapshot %s/%s with %d results", test_name, name, len(results))
    return Snapshot(name=name, test_name=test_name, results=results)
