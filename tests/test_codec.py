"""
Tests for the snapshot document codec.

Tests serialization of Results to JSON documents and back.
"""

import json
import math
from datetime import datetime, timedelta, timezone

import pytest

from rowsnap.codec import dump_file, from_document, load_file, marshal, to_document, unmarshal
from rowsnap.errors import MalformedSnapshotError, ScanError, UnsupportedTypeError
from rowsnap.types import ScanType
from tests.fixtures import make_col, make_result, users_result


def every_type_result():
    """One column per scan type with representative values."""
    values = {
        ScanType.STRING: "héllo \"world\"",
        ScanType.NULL_STRING: None,
        ScanType.INT: -(2**63),
        ScanType.INT8: -128,
        ScanType.INT16: 32767,
        ScanType.INT32: -5,
        ScanType.INT64: 2**63 - 1,
        ScanType.UINT: 2**64 - 1,
        ScanType.UINT8: 255,
        ScanType.UINT16: 65535,
        ScanType.UINT32: 4294967295,
        ScanType.UINT64: 2**64 - 1,
        ScanType.NULL_INT64: None,
        ScanType.FLOAT32: ScanType.FLOAT32.handler.decode(3.14),
        ScanType.FLOAT64: 2.718281828459045,
        ScanType.NULL_FLOAT64: 0.5,
        ScanType.TIMESTAMP: datetime(2024, 3, 10, 8, 30, 15, 123456,
                                     tzinfo=timezone(timedelta(hours=9))),
        ScanType.NULL_TIMESTAMP: None,
        ScanType.RAW_BYTES: b"\x00\xff\x10binary",
    }
    cols = [make_col(f"c_{t.tag}", t) for t in values]
    return make_result("everything", cols, [tuple(values.values())], is_table=True)


class TestRoundTrip:
    """Tests that unmarshal inverts marshal."""

    def test_every_scan_type(self):
        """Test a row holding every scan type."""
        result = every_type_result()
        again = unmarshal(marshal(result))

        assert again == result
        for before, after in zip(result.rows[0], again.rows[0]):
            assert type(after) is type(before)

    def test_row_order_kept(self):
        """Test that rows keep their recorded order."""
        rows = [(i, f"user{i}") for i in (5, 1, 3, 2, 4)]
        again = unmarshal(marshal(users_result(rows)))
        assert again.rows == rows

    def test_empty_result(self):
        """Test that a result with no rows keeps its columns."""
        again = unmarshal(marshal(users_result([])))
        assert len(again) == 0
        assert again.result_type.column_names == ["id", "name"]
        assert again.is_table

    def test_raw_bytes_null_and_empty(self):
        """Test that NULL and empty raw bytes stay distinct."""
        result = make_result("blobs", [make_col("b", ScanType.RAW_BYTES)], [(None,), (b"",)])
        again = unmarshal(marshal(result))
        assert again.rows == [(None,), (b"",)]

    def test_nan_survives(self):
        """Test that NaN floats come back as NaN."""
        result = make_result("f", [make_col("x", ScanType.FLOAT64)], [(math.nan,)])
        again = unmarshal(marshal(result))
        assert math.isnan(again.rows[0][0])

    def test_column_metadata(self):
        """Test that declared column metadata survives."""
        result = users_result()
        again = unmarshal(marshal(result))
        assert again.col_types == result.col_types

    def test_file_round_trip(self, tmp_path):
        """Test writing and reading a result file."""
        path = tmp_path / "users"
        dump_file(users_result(), path)

        assert path.read_text(encoding="utf-8").endswith("}\n")
        assert load_file(path) == users_result()


class TestDocumentLayout:
    """Tests for the serialized document shape."""

    def test_keys(self):
        """Test the top-level keys and scan type tags."""
        doc = to_document(users_result())

        assert doc["version"] == 1
        assert doc["name"] == "users"
        assert doc["isTable"] is True
        assert [c["scanType"] for c in doc["cols"]] == ["int32", "string"]
        assert doc["data"] == [[1, "ada"], [2, "grace"]]

    def test_indented_output(self):
        """Test that marshal writes indented JSON."""
        text = marshal(users_result())
        assert text.startswith("{\n  ")
        assert json.loads(text)["name"] == "users"

    def test_null_in_non_nullable_gives_zero(self):
        """Test that a stored null decodes to the zero value."""
        doc = to_document(users_result())
        doc["data"][0][1] = None

        result = from_document(doc)
        assert result.rows[0] == (1, "")


class TestMalformed:
    """Tests for rejecting bad documents."""

    def test_invalid_json(self):
        """Test that non-JSON text is rejected."""
        with pytest.raises(MalformedSnapshotError):
            unmarshal("{not json")

    def test_unknown_scan_type(self):
        """Test that an unknown tag is rejected."""
        doc = to_document(users_result())
        doc["cols"][0]["scanType"] = "decimal128"
        with pytest.raises(UnsupportedTypeError):
            from_document(doc)

    def test_missing_scan_type(self):
        """Test that a column without a tag is rejected."""
        doc = to_document(users_result())
        del doc["cols"][0]["scanType"]
        with pytest.raises(MalformedSnapshotError):
            from_document(doc)

    def test_row_width_mismatch(self):
        """Test that rows must match the column count."""
        doc = to_document(users_result())
        doc["data"][1] = [3]
        with pytest.raises(MalformedSnapshotError):
            from_document(doc)

    def test_wrong_version(self):
        """Test that unknown document versions are rejected."""
        doc = to_document(users_result())
        doc["version"] = 99
        with pytest.raises(MalformedSnapshotError):
            from_document(doc)

    def test_bad_value_names_column_and_row(self):
        """Test that a value of the wrong type reports where it is."""
        doc = to_document(users_result())
        doc["data"][1][0] = "two"

        with pytest.raises(ScanError) as exc:
            from_document(doc)
        assert exc.value.column == "id"
        assert exc.value.row == 1
