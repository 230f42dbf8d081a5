"""
Database Collaborator Interfaces for rowsnap

The engine never opens connections itself. It consumes a Database: anything
that can execute a query into a RowCursor and run a statement for its
affected row count. DBAPIDatabase adapts any PEP 249 connection.

Design Decisions:
    - Protocols rather than base classes, so test doubles need no inheritance
    - DBAPIDatabase commits after every exec; the engine never wraps replay
      in a transaction
    - Drivers differ in what cursor.description reports, so type names come
      from a type_code mapping, then from explicitly declared column types,
      then from type_code itself when it is already a string

Limitation:
    sqlite3 reports no type information at all; callers must declare column
    types for it through column_types, and nullable columns through
    nullable_columns.
"""

from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Protocol, Sequence

from rowsnap.types.resolver import ColumnDescriptor, default_scan_type


class RowCursor(Protocol):
    """Result of executing a query: column metadata plus rows in order."""

    def columns(self) -> list[ColumnDescriptor]:
        ...

    def __iter__(self) -> Iterator[Sequence[Any]]:
        ...

    def close(self) -> None:
        ...


class Database(Protocol):
    """The statements the engine needs from a database."""

    def execute(self, query: str, args: Sequence[Any] = ()) -> RowCursor:
        ...

    def exec(self, statement: str, args: Sequence[Any] = ()) -> int:
        ...


class DBAPIRowCursor:
    """
    RowCursor over a PEP 249 cursor.

    Rows are fetched lazily in arraysize batches, preserving cursor order.
    """

    def __init__(
        self,
        cursor: Any,
        describe: Callable[[Sequence[Any]], ColumnDescriptor],
    ) -> None:
        self._cursor = cursor
        self._describe = describe

    def columns(self) -> list[ColumnDescriptor]:
        description = self._cursor.description
        if description is None:
            raise ValueError("statement did not produce a result set")
        return [self._describe(entry) for entry in description]

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            batch = self._cursor.fetchmany()
            if not batch:
                return
            yield from batch

    def close(self) -> None:
        self._cursor.close()


class DBAPIDatabase:
    """
    Database adapter for a PEP 249 connection.

    Usage:
        conn = sqlite3.connect(":memory:")
        db = DBAPIDatabase(
            conn,
            column_types={"id": "INTEGER", "name": "VARCHAR"},
            nullable_columns={"name"},
        )
        result = fetch_table(db, "users", SQLiteStatementBuilder())
    """

    def __init__(
        self,
        connection: Any,
        type_names: Optional[Mapping[Any, str]] = None,
        column_types: Optional[Mapping[str, str]] = None,
        nullable_columns: Optional[Iterable[str]] = None,
        autocommit: bool = True,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            connection: An open PEP 249 connection
            type_names: Maps driver type codes to database type names
            column_types: Maps column names to declared database type names,
                          for drivers that report no type code
            nullable_columns: Column names declared nullable, for drivers
                              that report no null_ok; every other column
                              named in column_types is declared NOT NULL
            autocommit: Commit after every exec call
        """
        self._connection = connection
        self._type_names = dict(type_names or {})
        self._column_types = {k: v.upper() for k, v in (column_types or {}).items()}
        self._nullable_columns = frozenset(nullable_columns or ())
        self._autocommit = autocommit

    @property
    def connection(self) -> Any:
        return self._connection

    def execute(self, query: str, args: Sequence[Any] = ()) -> DBAPIRowCursor:
        cursor = self._connection.cursor()
        cursor.execute(query, tuple(args))
        return DBAPIRowCursor(cursor, self.describe)

    def exec(self, statement: str, args: Sequence[Any] = ()) -> int:
        cursor = self._connection.cursor()
        try:
            cursor.execute(statement, tuple(args))
            count = cursor.rowcount
        finally:
            cursor.close()
        if self._autocommit:
            self._connection.commit()
        return count

    def describe(self, entry: Sequence[Any]) -> ColumnDescriptor:
        """
        Map one cursor.description entry to a ColumnDescriptor.

        The 7-item entry is (name, type_code, display_size, internal_size,
        precision, scale, null_ok); trailing items may be missing or None.
        """
        fields = list(entry) + [None] * (7 - len(entry))
        name, type_code, _, internal_size, precision, scale, null_ok = fields[:7]

        type_name = self._type_name(name, type_code)
        nullable = self._nullable(name, null_ok)

        return ColumnDescriptor(
            name=name,
            database_type=type_name,
            full_database_type=type_name,
            nullable=nullable,
            length=internal_size,
            precision=precision,
            scale=scale,
            default_scan_type=default_scan_type(type_name, bool(nullable)),
        )

    def _nullable(self, name: str, null_ok: Any) -> Optional[bool]:
        if null_ok is not None:
            return bool(null_ok)
        if name in self._nullable_columns:
            return True
        if name in self._column_types:
            return False
        return None

    def _type_name(self, name: str, type_code: Any) -> str:
        if type_code is not None and type_code in self._type_names:
            return self._type_names[type_code].upper()
        if name in self._column_types:
            return self._column_types[name]
        if isinstance(type_code, str):
            return type_code.upper()
        return ""
