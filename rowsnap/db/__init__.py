"""
Database collaborator module for rowsnap.

This module provides the protocols the engine consumes, an adapter for
PEP 249 connections, and the statement builders used for capture and replay.
"""

from rowsnap.db.adapter import Database, DBAPIDatabase, DBAPIRowCursor, RowCursor
from rowsnap.db.statements import (
    MySQLStatementBuilder,
    SQLiteStatementBuilder,
    StatementBuilder,
)

__all__ = [
    "Database",
    "DBAPIDatabase",
    "DBAPIRowCursor",
    "RowCursor",
    "MySQLStatementBuilder",
    "SQLiteStatementBuilder",
    "StatementBuilder",
]
