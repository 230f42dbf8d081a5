"""
Type resolution module for rowsnap.

This module provides the closed set of canonical scan types and the
resolver that maps driver column metadata onto them.
"""

from rowsnap.types.scan_types import ScanType, ValueHandler
from rowsnap.types.resolver import (
    ColumnDescriptor,
    default_scan_type,
    describe_col,
    resolve_col_type,
    resolve_scan_type,
    schema_equal,
)

__all__ = [
    "ScanType",
    "ValueHandler",
    "ColumnDescriptor",
    "default_scan_type",
    "describe_col",
    "resolve_col_type",
    "resolve_scan_type",
    "schema_equal",
]
