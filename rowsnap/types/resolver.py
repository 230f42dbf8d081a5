"""
Column Type Resolution for rowsnap

Maps the column metadata a database driver reports into a ColType whose
canonical scan type is safe to serialize and compare.

Resolution Policy:
    CHAR, VARCHAR, TEXT, DECIMAL   -> string (null_string when nullable)
    TIMESTAMP, DATETIME            -> timestamp (null_timestamp when nullable)
    anything else                  -> the driver's default runtime type

Text, decimal and time types are special-cased because driver defaults for
them lose precision or cannot hold NULL. Everything else is accepted as the
driver reports it rather than growing an unbounded mapping table.

Schema equality compares name, database type and scan type only; length,
precision and scale are deliberately ignored.
"""

from dataclasses import dataclass
from typing import Optional, Union

from rowsnap.errors import UnsupportedTypeError
from rowsnap.models import ColType
from rowsnap.types.scan_types import ScanType


STRING_TYPES = frozenset({"CHAR", "VARCHAR", "TEXT", "DECIMAL"})
TIME_TYPES = frozenset({"TIMESTAMP", "DATETIME"})

# Runtime types drivers commonly pick for other column types; used when an
# adapter knows the type name but the driver does not say how to scan it.
_DRIVER_DEFAULTS: dict[str, tuple[ScanType, ScanType]] = {
    "TINYINT": (ScanType.INT8, ScanType.NULL_INT64),
    "SMALLINT": (ScanType.INT16, ScanType.NULL_INT64),
    "MEDIUMINT": (ScanType.INT32, ScanType.NULL_INT64),
    "INT": (ScanType.INT32, ScanType.NULL_INT64),
    "INTEGER": (ScanType.INT64, ScanType.NULL_INT64),
    "BIGINT": (ScanType.INT64, ScanType.NULL_INT64),
    "YEAR": (ScanType.UINT16, ScanType.NULL_INT64),
    "UNSIGNED TINYINT": (ScanType.UINT8, ScanType.NULL_INT64),
    "UNSIGNED SMALLINT": (ScanType.UINT16, ScanType.NULL_INT64),
    "UNSIGNED MEDIUMINT": (ScanType.UINT32, ScanType.NULL_INT64),
    "UNSIGNED INT": (ScanType.UINT32, ScanType.NULL_INT64),
    "UNSIGNED BIGINT": (ScanType.UINT64, ScanType.NULL_INT64),
    "FLOAT": (ScanType.FLOAT32, ScanType.NULL_FLOAT64),
    "REAL": (ScanType.FLOAT64, ScanType.NULL_FLOAT64),
    "DOUBLE": (ScanType.FLOAT64, ScanType.NULL_FLOAT64),
    "DATE": (ScanType.TIMESTAMP, ScanType.NULL_TIMESTAMP),
    "BINARY": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "VARBINARY": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "BLOB": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "TINYBLOB": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "MEDIUMBLOB": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "LONGBLOB": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "BIT": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "JSON": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "GEOMETRY": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "ENUM": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "SET": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
    "TIME": (ScanType.RAW_BYTES, ScanType.RAW_BYTES),
}


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    One column as described by a database driver.

    Undeclared properties are None, mirroring drivers that cannot report
    nullability, length or decimal size for every column.

    Attributes:
        name: Column name as returned by the query
        database_type: Driver type name, e.g. "VARCHAR"
        full_database_type: Full declared type, e.g. "varchar(255)", if known
        nullable: Declared nullability, None when not reported
        length: Declared length, None when not reported
        precision: Declared decimal precision, None when not reported
        scale: Declared decimal scale, None when not reported
        default_scan_type: The runtime type the driver would scan into,
                           as a ScanType or its tag; None when unknown
    """

    name: str
    database_type: str
    full_database_type: str = ""
    nullable: Optional[bool] = None
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default_scan_type: Union[ScanType, str, None] = None


def default_scan_type(database_type: str, nullable: bool = False) -> Optional[ScanType]:
    """
    Look up the runtime type a driver typically scans a database type into.

    Args:
        database_type: Driver type name (case-insensitive)
        nullable: Whether the column admits NULL

    Returns:
        The ScanType, or None if the type name is not in the table
    """
    pair = _DRIVER_DEFAULTS.get(database_type.upper())
    if pair is None:
        return None
    return pair[1] if nullable else pair[0]


def resolve_scan_type(descriptor: ColumnDescriptor) -> ScanType:
    """
    Choose the canonical scan type for one column.

    Raises:
        UnsupportedTypeError: If the column falls through to a driver default
                              that is missing or not a known scan type
    """
    type_name = descriptor.database_type.upper()
    nullable = bool(descriptor.nullable)

    if type_name in STRING_TYPES:
        return ScanType.NULL_STRING if nullable else ScanType.STRING
    if type_name in TIME_TYPES:
        return ScanType.NULL_TIMESTAMP if nullable else ScanType.TIMESTAMP

    default = descriptor.default_scan_type
    if isinstance(default, ScanType):
        return default
    if default is None:
        raise UnsupportedTypeError(
            f"column {descriptor.name!r}: no scan type for database type "
            f"{descriptor.database_type!r}"
        )
    return ScanType.from_tag(default)


def resolve_col_type(descriptor: ColumnDescriptor) -> ColType:
    """
    Build the immutable ColType for a driver column.

    Args:
        descriptor: Column metadata reported by the driver

    Returns:
        ColType with its declared-ness flags and canonical scan type set
    """
    has_precision_scale = descriptor.precision is not None or descriptor.scale is not None

    return ColType(
        name=descriptor.name,
        database_type=descriptor.database_type,
        full_database_type=descriptor.full_database_type,
        nullable=bool(descriptor.nullable),
        has_nullable=descriptor.nullable is not None,
        length=descriptor.length or 0,
        has_length=descriptor.length is not None,
        precision=descriptor.precision or 0,
        scale=descriptor.scale or 0,
        has_precision_scale=has_precision_scale,
        scan_type=resolve_scan_type(descriptor),
    )


def schema_equal(expect: ColType, actual: ColType) -> bool:
    """Two columns are schema-equal when name, database type and scan type match."""
    return (
        expect.name == actual.name
        and expect.database_type == actual.database_type
        and expect.scan_type is actual.scan_type
    )


def describe_col(col: ColType) -> str:
    """Short human description of a column for diagnostics."""
    return f"{col.name} {col.database_type} ({col.scan_type.tag})"
