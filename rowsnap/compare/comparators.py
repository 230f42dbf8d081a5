"""
Built-in column comparators.

A comparator is called as fn(expected, actual) and returns
(diagnostic, equal); the diagnostic is empty when equal is True. All of
these are pure functions and safe to share between queries and threads.
"""

from datetime import datetime
from typing import Any

from rowsnap.models import Comparator, ResultType
from rowsnap.types.scan_types import ScanType


def exact_equal(expect: Any, actual: Any) -> tuple[str, bool]:
    """Plain equality; the default for ordinary scalar columns."""
    if expect != actual:
        return f"expect: {expect!r}, actual: {actual!r}", False
    return "", True


def time_equal(expect: Any, actual: Any) -> tuple[str, bool]:
    """Both values denote the same instant (or both are NULL)."""
    if expect is None or actual is None:
        if expect is actual:
            return "", True
        return f"expect: {expect!r}, actual: {actual!r}", False

    diff = _datetime_pair_error(expect, actual)
    if diff:
        return diff, False
    if expect != actual:
        return f"expect: {expect.isoformat()}, actual: {actual.isoformat()}", False
    return "", True


def time_after(expect: Any, actual: Any) -> tuple[str, bool]:
    """
    The actual timestamp is strictly later than the recorded one.

    Useful for server-generated columns such as updated_at, whose exact
    value changes on every run.
    """
    diff = _datetime_pair_error(expect, actual)
    if diff:
        return diff, False

    if not actual > expect:
        return "actual time should after expect time", False
    return "", True


def _datetime_pair_error(expect: Any, actual: Any) -> str:
    # naive and aware datetimes cannot be ordered against each other
    for value in (actual, expect):
        if not isinstance(value, datetime):
            return f"expect datetime, get {type(value).__name__}"

    if _is_aware(expect) != _is_aware(actual):
        return (
            f"cannot compare offset-naive and offset-aware times, "
            f"expect: {expect.isoformat()}, actual: {actual.isoformat()}"
        )
    return ""


def _is_aware(value: datetime) -> bool:
    return value.utcoffset() is not None


def raw_bytes_equal(expect: Any, actual: Any) -> tuple[str, bool]:
    """Byte-for-byte equality of raw byte columns (NULL equals only NULL)."""
    if expect is None or actual is None:
        if expect is actual:
            return "", True
        return f"expect: {expect!r}, actual: {actual!r}", False

    if bytes(expect) != bytes(actual):
        return f"expect: {bytes(expect)!r}, actual: {bytes(actual)!r}", False
    return "", True


def default_comparators(result_type: ResultType) -> dict[str, Comparator]:
    """
    Comparators for every column that has no default equality.

    Timestamp columns get time_equal and raw byte columns get
    raw_bytes_equal. Useful when comparing two stored snapshots, where no
    query supplies its own overrides.
    """
    comparators: dict[str, Comparator] = {}
    for col in result_type.col_types:
        if col.scan_type in (ScanType.TIMESTAMP, ScanType.NULL_TIMESTAMP):
            comparators[col.name] = time_equal
        elif col.scan_type is ScanType.RAW_BYTES:
            comparators[col.name] = raw_bytes_equal
    return comparators
