"""
Statement building for table capture and replay.

StatementBuilder produces the three statements the engine issues against a
table: SELECT * for capture, TRUNCATE before replay, and a parameterized
multi-row INSERT per replay batch. Placeholder and identifier quoting are
configurable so one builder covers qmark, format and numeric styles.
"""

from typing import Any, Sequence


class StatementBuilder:
    """
    Builds parameterized SQL for a single table.

    Attributes:
        placeholder: Bind marker; "?" for qmark, "%s" for format style,
                     or a template containing "{n}" for numbered styles
        quote: Identifier quote character; "" disables quoting
    """

    def __init__(self, placeholder: str = "?", quote: str = '"') -> None:
        self.placeholder = placeholder
        self.quote = quote

    def quote_ident(self, name: str) -> str:
        """Quote a table or column identifier, doubling embedded quotes."""
        if not self.quote:
            return name
        escaped = name.replace(self.quote, self.quote * 2)
        return f"{self.quote}{escaped}{self.quote}"

    def select(self, table: str) -> tuple[str, list[Any]]:
        """Statement selecting every row of a table."""
        return f"SELECT * FROM {self.quote_ident(table)}", []

    def truncate(self, table: str) -> str:
        """Statement removing every row of a table."""
        return f"TRUNCATE TABLE {self.quote_ident(table)}"

    def insert(
        self,
        table: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
    ) -> tuple[str, list[Any]]:
        """
        Multi-row INSERT for one batch.

        Args:
            table: Target table
            columns: Column names, in row value order
            rows: One value sequence per row

        Returns:
            (statement, flattened bind arguments)

        Raises:
            ValueError: If rows is empty or a row width differs from columns
        """
        if not rows:
            raise ValueError("insert needs at least one row")

        args: list[Any] = []
        groups = []
        for row in rows:
            if len(row) != len(columns):
                raise ValueError(f"row has {len(row)} values, expected {len(columns)}")
            marks = [self._mark(len(args) + i + 1) for i in range(len(row))]
            groups.append("(" + ", ".join(marks) + ")")
            args.extend(row)

        cols = ", ".join(self.quote_ident(c) for c in columns)
        statement = (
            f"INSERT INTO {self.quote_ident(table)} ({cols}) VALUES "
            + ", ".join(groups)
        )
        return statement, args

    def _mark(self, n: int) -> str:
        if "{n}" in self.placeholder:
            return self.placeholder.replace("{n}", str(n))
        return self.placeholder


class MySQLStatementBuilder(StatementBuilder):
    """Backtick quoting and format-style placeholders."""

    def __init__(self) -> None:
        super().__init__(placeholder="%s", quote="`")


class SQLiteStatementBuilder(StatementBuilder):
    """SQLite has no TRUNCATE; an unqualified DELETE takes its place."""

    def truncate(self, table: str) -> str:
        return f"DELETE FROM {self.quote_ident(table)}"
