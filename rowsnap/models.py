"""
Core Data Models for rowsnap

This module defines the canonical data structures used throughout the system:
- ColType: One column's schema fingerprint and canonical scan type
- ResultType: The ordered column layout of a result
- Row: A read-only view of one row of a Result
- Result: An in-memory typed table produced by a query or table scan
- Query: A named statement plus its per-column comparator overrides
- Snapshot: A named, ordered collection of Results for one test

These models are designed to be:
- Immutable where possible (using frozen dataclasses)
- Free of validation logic; scanning and the codec construct them
- Positional: column order and row order are part of their identity
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Sequence

if TYPE_CHECKING:
    from rowsnap.types.scan_types import ScanType


# (expected value, actual value) -> (diagnostic, equal)
Comparator = Callable[[Any, Any], tuple[str, bool]]


@dataclass(frozen=True)
class ColType:
    """
    Schema fingerprint of a single column.

    The scan_type, not the database_type string, determines how values of
    the column are decoded, encoded and compared.

    Attributes:
        name: Column name
        database_type: Driver-reported type name, e.g. "VARCHAR"
        full_database_type: Full declared type, if the driver reports one
        nullable: Declared nullability (False when undeclared)
        has_nullable: Whether the driver declared nullability at all
        length: Declared length (0 when undeclared)
        has_length: Whether the driver declared a length
        precision: Declared decimal precision (0 when undeclared)
        scale: Declared decimal scale (0 when undeclared)
        has_precision_scale: Whether the driver declared precision and scale
        scan_type: Canonical scan type for values of this column
    """

    name: str
    database_type: str
    scan_type: "ScanType"
    full_database_type: str = ""
    nullable: bool = False
    has_nullable: bool = False
    length: int = 0
    has_length: bool = False
    precision: int = 0
    scale: int = 0
    has_precision_scale: bool = False


@dataclass(frozen=True)
class ResultType:
    """
    Ordered column layout of a result.

    Attributes:
        name: Result name (the query name, or the table name)
        is_table: True if the result holds a whole table and can be replayed
        col_types: Columns in query order
    """

    name: str = ""
    is_table: bool = False
    col_types: tuple[ColType, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.col_types]

    def __len__(self) -> int:
        return len(self.col_types)


@dataclass(frozen=True)
class Row:
    """One row of a Result, sharing the Result's ResultType."""

    result_type: ResultType
    values: tuple[Any, ...]

    def __getitem__(self, key: int | str) -> Any:
        if isinstance(key, str):
            return self.values[self.result_type.column_names.index(key)]
        return self.values[key]

    def __len__(self) -> int:
        return len(self.values)

    def as_dict(self) -> dict[str, Any]:
        """Map column names to values."""
        return dict(zip(self.result_type.column_names, self.values))


@dataclass
class Query:
    """
    A named statement whose result can be recorded and checked.

    Comparators registered here override the default equality for the
    named columns when a result produced by this query is compared.

    Attributes:
        name: Result name the query's output is stored under
        sql: Statement text
        args: Bind parameters for the statement
        is_table: True if the statement selects an entire table
        comparators: Column name to comparator overrides
    """

    name: str
    sql: str
    args: tuple[Any, ...] = ()
    is_table: bool = False
    comparators: dict[str, Comparator] = field(default_factory=dict)

    @classmethod
    def table(cls, name: str, sql: Optional[str] = None) -> "Query":
        """Create a query that selects every row of a table."""
        return cls(name=name, sql=sql or f"SELECT * FROM {name}", is_table=True)

    def register_comparator(self, column: str, fn: Comparator) -> "Query":
        """
        Override equality for one column; returns the query for chaining.

        Args:
            column: Column name the comparator applies to
            fn: Comparator called as fn(expected, actual)
        """
        self.comparators[column] = fn
        return self


@dataclass(frozen=True)
class Result:
    """
    An in-memory typed table.

    Attributes:
        result_type: Column layout shared by every row
        rows: Row values in cursor order; each tuple has one value per column
        query: The query that produced the result, carrying comparators

    Invariants:
        - len(row) == len(result_type.col_types) for every row
        - value i of a row has the representation of column i's scan type
    """

    result_type: ResultType
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    query: Optional[Query] = None

    @property
    def name(self) -> str:
        return self.result_type.name

    @property
    def is_table(self) -> bool:
        return self.result_type.is_table

    @property
    def col_types(self) -> tuple[ColType, ...]:
        return self.result_type.col_types

    @property
    def comparators(self) -> dict[str, Comparator]:
        """Comparators registered on the producing query, if any."""
        return self.query.comparators if self.query else {}

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, i: int) -> Row:
        """Return a view of row i without copying column metadata."""
        return Row(result_type=self.result_type, values=self.rows[i])

    def __getitem__(self, i: int) -> Row:
        return self.row(i)

    def __iter__(self) -> Iterator[Row]:
        for values in self.rows:
            yield Row(result_type=self.result_type, values=values)

    def with_query(self, query: Optional[Query]) -> "Result":
        """Return a new Result bound to a query (immutable update)."""
        return replace(self, query=query)

    def renamed(self, name: str, is_table: Optional[bool] = None) -> "Result":
        """Return a new Result under another name and table flag."""
        result_type = replace(
            self.result_type,
            name=name,
            is_table=self.is_table if is_table is None else is_table,
        )
        return replace(self, result_type=result_type)


@dataclass(frozen=True)
class Snapshot:
    """
    A named checkpoint of results recorded for one test.

    Attributes:
        name: Snapshot name, unique within the test
        test_name: Identifier of the test that owns the snapshot
        results: Results in recording order
    """

    name: str
    test_name: str
    results: tuple[Result, ...] = ()

    @property
    def result_names(self) -> list[str]:
        return [r.name for r in self.results]

    def result(self, name: str) -> Optional[Result]:
        """Find a result by name."""
        for r in self.results:
            if r.name == name:
                return r
        return None

    def __len__(self) -> int:
        return len(self.results)

    def bind_queries(self, queries: Sequence[Query]) -> "Snapshot":
        """
        Return a new Snapshot whose results carry the matching queries.

        Results are matched to queries by name; results with no matching
        query keep whatever query they had.
        """
        by_name = {q.name: q for q in queries}
        results = tuple(
            r.with_query(by_name[r.name]) if r.name in by_name else r
            for r in self.results
        )
        return replace(self, results=results)
