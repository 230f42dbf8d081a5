"""
Snapshot replay into a live database.

Seeds test state by truncating each table a Snapshot recorded and inserting
its rows back in fixed-size batches.

Semantics:
    - Every Result must be flagged as a table; this is checked for the whole
      Snapshot before the first statement is issued
    - Tables are replayed in snapshot order; rows in recorded order
    - There is no surrounding transaction. The first failing statement is
      raised as QueryError and leaves that table partially loaded and any
      earlier tables fully loaded
"""

import logging
from typing import Optional

from rowsnap.db.adapter import Database
from rowsnap.db.statements import StatementBuilder
from rowsnap.errors import NotATableError, QueryError
from rowsnap.models import Result, Snapshot


DEFAULT_BATCH_SIZE = 1000

logger = logging.getLogger(__name__)


def apply_result(
    result: Result,
    db: Database,
    builder: Optional[StatementBuilder] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """
    Replace a table's contents with a recorded Result.

    Args:
        result: A Result captured from a whole table
        db: Database collaborator
        builder: Statement builder for the target dialect
        batch_size: Rows per INSERT statement

    Returns:
        Number of rows inserted

    Raises:
        NotATableError: If the result is not flagged as a table; no
                        statement is issued
        QueryError: If truncate or any insert batch fails
    """
    if not result.is_table:
        raise NotATableError(result.name)
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    builder = builder or StatementBuilder()
    table = result.name
    columns = [c.name for c in result.col_types]

    _exec(db, builder.truncate(table), [])

    inserted = 0
    for start in range(0, len(result.rows), batch_size):
        batch = result.rows[start:start + batch_size]
        statement, args = builder.insert(table, columns, batch)
        _exec(db, statement, args)
        inserted += len(batch)
        logger.debug("Inserted rows %d-%d into %s", start, start + len(batch) - 1, table)

    logger.info("Applied %d rows to %s", inserted, table)
    return inserted


def apply_snapshot(
    snapshot: Snapshot,
    db: Database,
    builder: Optional[StatementBuilder] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """
    Replay every table of a Snapshot.

    Returns:
        Total number of rows inserted

    Raises:
        NotATableError: If any result is not a table; checked before any
                        statement is issued
        QueryError: On the first failing statement
    """
    for result in snapshot.results:
        if not result.is_table:
            raise NotATableError(result.name)

    return sum(
        apply_result(result, db, builder=builder, batch_size=batch_size)
        for result in snapshot.results
    )


def _exec(db: Database, statement: str, args: list) -> int:
    try:
        return db.exec(statement, args)
    except Exception as e:
        raise QueryError(f"statement failed: {e}", statement=statement) from e
