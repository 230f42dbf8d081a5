"""
Snapshot Document Codec for rowsnap

Serializes a Result into a self-describing JSON document and re-hydrates it
with exactly the value representations a fresh scan would produce.

Document Layout:
    {
      "version": 1,
      "name": "orders",
      "isTable": true,
      "cols": [{"name": ..., "databaseType": ..., "scanType": "int64", ...}],
      "data": [[1, "widget", null], ...]
    }

Design Decisions:
    - Scan types are written as tag strings from the closed ScanType set,
      never as Python type names
    - Each cell is decoded into a fresh zero-value placeholder of its
      column's scan type, so a JSON null in a non-nullable column yields the
      zero value rather than a stray None
    - Rows stay plain arrays aligned to cols; row order is never changed
    - Output is indented JSON so recorded snapshots diff well under version control

Round-trip Guarantee:
    unmarshal(marshal(r)) == r, value-for-value and order-for-order
"""

import json
from pathlib import Path
from typing import Any, Union

from rowsnap.errors import MalformedSnapshotError, ScanError
from rowsnap.models import ColType, Result, ResultType
from rowsnap.types.scan_types import ScanType


FORMAT_VERSION = 1


def col_type_to_dict(col: ColType) -> dict[str, Any]:
    """Serialize one ColType to its document form."""
    return {
        "name": col.name,
        "databaseType": col.database_type,
        "fullDatabaseType": col.full_database_type,
        "nullable": col.nullable,
        "hasNullable": col.has_nullable,
        "length": col.length,
        "hasLength": col.has_length,
        "precision": col.precision,
        "scale": col.scale,
        "hasPrecisionScale": col.has_precision_scale,
        "scanType": col.scan_type.tag,
    }


def col_type_from_dict(data: dict[str, Any]) -> ColType:
    """
    Rebuild a ColType from its document form.

    Raises:
        UnsupportedTypeError: If the scanType tag is unknown
        MalformedSnapshotError: If a required key is missing
    """
    if not isinstance(data, dict):
        raise MalformedSnapshotError(f"column entry must be an object, got {data!r}")
    try:
        name = data["name"]
        tag = data["scanType"]
    except KeyError as e:
        raise MalformedSnapshotError(f"column entry is missing {e.args[0]!r}") from None

    return ColType(
        name=name,
        database_type=data.get("databaseType", ""),
        full_database_type=data.get("fullDatabaseType", ""),
        nullable=data.get("nullable", False),
        has_nullable=data.get("hasNullable", False),
        length=data.get("length", 0),
        has_length=data.get("hasLength", False),
        precision=data.get("precision", 0),
        scale=data.get("scale", 0),
        has_precision_scale=data.get("hasPrecisionScale", False),
        scan_type=ScanType.from_tag(tag),
    )


def to_document(result: Result) -> dict[str, Any]:
    """
    Convert a Result into a JSON-ready document.

    Args:
        result: The Result to serialize

    Returns:
        Dictionary with version, name, isTable, cols and data keys
    """
    handlers = [c.scan_type.handler for c in result.col_types]
    data = [
        [handler.encode(value) for handler, value in zip(handlers, row)]
        for row in result.rows
    ]

    return {
        "version": FORMAT_VERSION,
        "name": result.name,
        "isTable": result.is_table,
        "cols": [col_type_to_dict(c) for c in result.col_types],
        "data": data,
    }


def from_document(doc: dict[str, Any]) -> Result:
    """
    Rebuild a Result from a parsed document.

    Args:
        doc: Dictionary as produced by to_document

    Returns:
        The re-hydrated Result (with no query bound)

    Raises:
        MalformedSnapshotError: If the document shape is wrong
        UnsupportedTypeError: If a column carries an unknown scan type tag
        ScanError: If a stored value cannot be decoded for its column
    """
    if not isinstance(doc, dict):
        raise MalformedSnapshotError("snapshot document must be a JSON object")

    version = doc.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise MalformedSnapshotError(f"unsupported document version: {version!r}")

    cols = doc.get("cols")
    data = doc.get("data")
    if not isinstance(cols, list) or not isinstance(data, list):
        raise MalformedSnapshotError("snapshot document needs 'cols' and 'data' arrays")

    col_types = tuple(col_type_from_dict(c) for c in cols)
    handlers = [c.scan_type.handler for c in col_types]

    rows = []
    for i, stored in enumerate(data):
        if not isinstance(stored, list) or len(stored) != len(col_types):
            raise MalformedSnapshotError(
                f"row {i} has {len(stored) if isinstance(stored, list) else 'no'} "
                f"values, expected {len(col_types)}"
            )

        values = []
        for col, handler, cell in zip(col_types, handlers, stored):
            try:
                values.append(handler.load(cell))
            except (TypeError, ValueError) as e:
                raise ScanError(
                    f"row {i}, column {col.name!r} ({col.scan_type.tag}): {e}",
                    column=col.name,
                    row=i,
                ) from e
        rows.append(tuple(values))

    return Result(
        result_type=ResultType(
            name=doc.get("name", ""),
            is_table=bool(doc.get("isTable", False)),
            col_types=col_types,
        ),
        rows=rows,
    )


def marshal(result: Result) -> str:
    """Serialize a Result to indented JSON text."""
    return json.dumps(to_document(result), indent=2, ensure_ascii=False)


def unmarshal(data: Union[str, bytes]) -> Result:
    """
    Parse JSON text produced by marshal back into a Result.

    Raises:
        MalformedSnapshotError: If the text is not valid JSON
    """
    try:
        doc = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedSnapshotError(f"invalid snapshot JSON: {e}") from e
    return from_document(doc)


def load_file(path: Union[str, Path]) -> Result:
    """Read and decode one stored result file."""
    path = Path(path)
    return unmarshal(path.read_text(encoding="utf-8"))


def dump_file(result: Result, path: Union[str, Path]) -> None:
    """Write one result file, ending with a newline."""
    path = Path(path)
    path.write_text(marshal(result) + "\n", encoding="utf-8")
