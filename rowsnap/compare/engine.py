"""
Result Comparison for rowsnap

This module implements structural and value-level comparison of a recorded
Result against a freshly scanned one.

Comparison Order:
    1. Column count, then each column's schema (name, database type, scan type)
    2. Row count
    3. Each row in order, column by column:
       - a comparator registered for the column name decides, if present
       - otherwise the scan type's default equality
       - timestamp and raw byte columns have no default equality; comparing
         one without a comparator raises ComparatorMissingError

Design Decisions:
    - Positional: rows and columns are compared by index, never by content
    - First divergence only: each call reports the earliest mismatch, not an
      aggregate diff
    - The compare_* functions return (diagnostic, equal); the check_*
      functions raise StructuralMismatch or ValueMismatch with the same text

Representation:
    Input: expected Result (usually loaded), actual Result (usually scanned)
    Transformation: schema check, then per-row value comparison
    Output: diagnostic string and verdict
    Limitation: a single extra row reports as a row count mismatch with no
                indication of which row was added
"""

from typing import Any, Mapping, Optional, Sequence

from rowsnap.errors import (
    ComparatorMissingError,
    MismatchError,
    StructuralMismatch,
    ValueMismatch,
)
from rowsnap.models import ColType, Comparator, Result, ResultType, Snapshot
from rowsnap.types.resolver import describe_col, schema_equal


def compare_col_type(expect: ColType, actual: ColType) -> bool:
    """Schema equality of two columns; length, precision and scale are ignored."""
    return schema_equal(expect, actual)


def compare_result_type(expect: ResultType, actual: ResultType) -> tuple[str, bool]:
    """
    Compare two column layouts.

    Args:
        expect: The recorded layout
        actual: The freshly scanned layout

    Returns:
        (diagnostic, equal); the diagnostic names both column counts when
        they differ, or the first column that differs
    """
    mismatch = _result_type_divergence(expect, actual)
    if mismatch is not None:
        return mismatch.diagnostic, False
    return "", True


def compare_row(
    expect: Sequence[Any],
    actual: Sequence[Any],
    col_types: Sequence[ColType],
    comparators: Optional[Mapping[str, Comparator]] = None,
) -> tuple[str, bool]:
    """
    Compare one row value by value.

    Args:
        expect: Recorded row values
        actual: Scanned row values
        col_types: Column layout shared by both rows
        comparators: Column name to comparator overrides

    Returns:
        (diagnostic, equal) for the first differing column

    Raises:
        ComparatorMissingError: If a timestamp or raw byte column has no
                                registered comparator
    """
    comparators = comparators or {}

    for col, expect_value, actual_value in zip(col_types, expect, actual):
        fn = comparators.get(col.name)
        if fn is not None:
            diff, same = fn(expect_value, actual_value)
            if not same:
                return f"check row fail, col: {col.name}, {diff}", False
            continue

        if not col.scan_type.comparable:
            raise ComparatorMissingError(col.name, col.scan_type.tag)

        if not col.scan_type.handler.equal(expect_value, actual_value):
            return (
                f"check row fail, col: {col.name}, "
                f"expect: {expect_value!r}, actual: {actual_value!r}",
                False,
            )

    return "", True


def compare_result(
    expect: Result,
    actual: Result,
    comparators: Optional[Mapping[str, Comparator]] = None,
) -> tuple[str, bool]:
    """
    Compare two Results: layout, row count, then every row in order.

    Args:
        expect: The recorded Result
        actual: The freshly scanned Result
        comparators: Overrides; defaults to those registered on expect's query

    Returns:
        (diagnostic, equal); a row diagnostic includes the full expected row
    """
    mismatch = _result_divergence(expect, actual, comparators)
    if mismatch is not None:
        return mismatch.diagnostic, False
    return "", True


def compare_snapshot(expect: Snapshot, actual: Snapshot) -> tuple[str, bool]:
    """
    Compare two Snapshots result by result, in order.

    Each result pair uses the comparators of the expected result's query.
    """
    mismatch = _snapshot_divergence(expect, actual)
    if mismatch is not None:
        return mismatch.diagnostic, False
    return "", True


def check_result(
    expect: Result,
    actual: Result,
    comparators: Optional[Mapping[str, Comparator]] = None,
) -> None:
    """
    Raising form of compare_result.

    Raises:
        StructuralMismatch: If the layouts differ
        ValueMismatch: If the row counts or any row differ
    """
    mismatch = _result_divergence(expect, actual, comparators)
    if mismatch is not None:
        raise mismatch


def check_snapshot(expect: Snapshot, actual: Snapshot) -> None:
    """
    Raising form of compare_snapshot.

    Raises:
        StructuralMismatch: If the result lists or any layout differ
        ValueMismatch: If any result's rows differ
    """
    mismatch = _snapshot_divergence(expect, actual)
    if mismatch is not None:
        raise mismatch


def _result_type_divergence(
    expect: ResultType,
    actual: ResultType,
) -> Optional[StructuralMismatch]:
    if len(expect.col_types) != len(actual.col_types):
        return StructuralMismatch(
            f"{expect.name} has {len(expect.col_types)} columns, "
            f"but {actual.name} has {len(actual.col_types)} columns"
        )

    for i, (e, a) in enumerate(zip(expect.col_types, actual.col_types)):
        if not compare_col_type(e, a):
            return StructuralMismatch(
                f"at index {i}, column {describe_col(e)} differs from {describe_col(a)}"
            )
    return None


def _result_divergence(
    expect: Result,
    actual: Result,
    comparators: Optional[Mapping[str, Comparator]],
) -> Optional[MismatchError]:
    mismatch = _result_type_divergence(expect.result_type, actual.result_type)
    if mismatch is not None:
        return mismatch

    if len(expect.rows) != len(actual.rows):
        return ValueMismatch(
            f"check result fail: expect {len(expect.rows)} rows, "
            f"actual {len(actual.rows)} rows"
        )

    if comparators is None:
        comparators = expect.comparators

    for i, (expect_row, actual_row) in enumerate(zip(expect.rows, actual.rows)):
        diff, same = compare_row(expect_row, actual_row, expect.col_types, comparators)
        if not same:
            return ValueMismatch(
                f"check result fail, row {i}: {list(expect_row)!r}\n{diff}",
                row=i,
            )
    return None


def _snapshot_divergence(expect: Snapshot, actual: Snapshot) -> Optional[MismatchError]:
    if len(expect.results) != len(actual.results):
        return StructuralMismatch(
            f"snapshot {expect.name} has {len(expect.results)} results, "
            f"but {actual.name} has {len(actual.results)} results"
        )

    for i, (e, a) in enumerate(zip(expect.results, actual.results)):
        if e.name != a.name:
            return StructuralMismatch(
                f"at index {i}, result {e.name!r} differs from {a.name!r}"
            )

        mismatch = _result_divergence(e, a, None)
        if mismatch is None:
            continue

        diagnostic = f"check snapshot fail, result name: {e.name}\n{mismatch.diagnostic}"
        if isinstance(mismatch, ValueMismatch):
            return ValueMismatch(diagnostic, row=mismatch.row)
        return StructuralMismatch(diagnostic)
    return None
