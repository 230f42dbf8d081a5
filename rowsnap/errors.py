"""
Error Types for rowsnap

Every failure the engine reports derives from SnapshotError, so callers can
catch the whole family at a test-harness boundary while still telling the
kinds apart.

Taxonomy:
    QueryError: the database collaborator failed to execute a statement
    ScanError: column metadata unreadable, or a value failed to decode
    UnsupportedTypeError: unknown scan type tag, or no usable driver default
    StructuralMismatch: column count or schema differs between two results
    ValueMismatch: a row-level comparison reported inequality
    SnapshotExistsError: save without overwrite over an existing snapshot
    SnapshotNotFoundError: load of a snapshot that was never recorded
    NotATableError: apply on a result that was not captured from a table
    ComparatorMissingError: a column that has no default equality lacks a comparator
    MalformedSnapshotError: a stored document or manifest is not well-formed
    InvalidNameError: a snapshot or result name cannot be used as a path component

None of these are retried internally.
"""

from pathlib import Path
from typing import Optional


class SnapshotError(Exception):
    """Base class for all rowsnap errors."""


class QueryError(SnapshotError):
    """A statement sent to the database collaborator failed."""

    def __init__(self, message: str, statement: Optional[str] = None) -> None:
        super().__init__(message)
        self.statement = statement


class ScanError(SnapshotError):
    """
    A column could not be described or one of its values could not be decoded.

    Attributes:
        column: Name of the offending column, when known
        row: Zero-based index of the offending row, when known
    """

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        row: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.column = column
        self.row = row


class UnsupportedTypeError(SnapshotError):
    """A scan type tag or driver runtime type is outside the closed set."""

    def __init__(self, message: str, tag: Optional[str] = None) -> None:
        super().__init__(message)
        self.tag = tag


class MismatchError(SnapshotError):
    """Common base for comparison failures; carries the diagnostic text."""

    def __init__(self, diagnostic: str) -> None:
        super().__init__(diagnostic)
        self.diagnostic = diagnostic


class StructuralMismatch(MismatchError):
    """Two results differ in schema or shape before any value is compared."""


class ValueMismatch(MismatchError):
    """Two results share a schema but a row differs."""

    def __init__(self, diagnostic: str, row: Optional[int] = None) -> None:
        super().__init__(diagnostic)
        self.row = row


class SnapshotExistsError(SnapshotError):
    """Refused to overwrite an existing snapshot directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"snapshot already exists: {path}")
        self.path = path


class SnapshotNotFoundError(SnapshotError):
    """No snapshot is stored at the requested location."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"snapshot not found: {path}")
        self.path = path


class NotATableError(SnapshotError):
    """Only results captured from a whole table can be replayed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"result {name!r} is not a table")
        self.name = name


class ComparatorMissingError(SnapshotError):
    """A timestamp or raw-bytes column was compared without a comparator."""

    def __init__(self, column: str, tag: str) -> None:
        super().__init__(
            f"column {column!r} has scan type {tag!r}, which has no default "
            f"equality; register a comparator for it"
        )
        self.column = column
        self.tag = tag


class MalformedSnapshotError(SnapshotError):
    """A stored result document or manifest could not be interpreted."""


class InvalidNameError(SnapshotError, ValueError):
    """A name is not usable as a snapshot or result identifier."""
