"""
Canonical Scan Types for rowsnap

This module defines the closed set of runtime representations a column can
be scanned into. The scan type, not the database type name, decides how a
value is decoded from the driver, written to a snapshot document, read back,
and compared.

Key Components:
    - ScanType: the enumeration; its value is the serialized tag
    - ValueHandler: per-type behaviour (zero value, decode, encode, load, equality)
    - StringHandler, IntegerHandler, FloatHandler, TimestampHandler,
      RawBytesHandler: the concrete handlers

Design Decisions:
    - Every member maps to exactly one handler instance; there is no runtime
      type discovery
    - Handlers raise plain ValueError/TypeError; callers that know the column
      and row wrap them into ScanError
    - Nullable members represent SQL NULL as None
    - Timestamps and raw bytes have no default equality; comparing them
      requires a registered comparator

Representation:
    Input: values produced by a DB-API driver, or JSON values from a snapshot
    Transformation: per-type coercion into one canonical Python value
    Output: str, int, float, datetime, bytes or None
    Limitation: float32 columns are rounded through IEEE single precision, so
                a driver that already widened the value loses nothing further
"""

import base64
import binascii
import math
import struct
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from rowsnap.errors import UnsupportedTypeError


ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ValueHandler:
    """
    Behaviour shared by one family of scan types.

    Attributes:
        nullable: Whether SQL NULL (None) is a legal value
        comparable: Whether plain equality is meaningful without a comparator
    """

    nullable: bool = False
    comparable: bool = True

    def zero(self) -> Any:
        """Return the placeholder a cell holds before a value is decoded into it."""
        return None if self.nullable else self._zero()

    def _zero(self) -> Any:
        raise NotImplementedError

    def decode(self, raw: Any) -> Any:
        """Coerce a driver-supplied value into the canonical representation."""
        if raw is None:
            if self.nullable:
                return None
            raise ValueError("NULL in a column that is not nullable")
        return self._decode(raw)

    def _decode(self, raw: Any) -> Any:
        raise NotImplementedError

    def encode(self, value: Any) -> Any:
        """Return a JSON-safe form of a canonical value."""
        if value is None:
            return None
        return self._encode(value)

    def _encode(self, value: Any) -> Any:
        return value

    def load(self, stored: Any) -> Any:
        """Decode a JSON value into a fresh placeholder for this type."""
        value = self.zero()
        if stored is not None:
            value = self._load(stored)
        return value

    def _load(self, stored: Any) -> Any:
        return self._decode(stored)

    def equal(self, expect: Any, actual: Any) -> bool:
        """Default equality for two canonical values."""
        return expect == actual


@dataclass(frozen=True)
class StringHandler(ValueHandler):
    """Text, and DECIMAL values kept as their exact decimal text."""

    def _zero(self) -> str:
        return ""

    def _decode(self, raw: Any) -> str:
        if isinstance(raw, str):
            return raw
        if isinstance(raw, (bytes, bytearray, memoryview)):
            return bytes(raw).decode("utf-8")
        if isinstance(raw, bool):
            raise TypeError(f"cannot decode {type(raw).__name__} as string")
        if isinstance(raw, (int, float, Decimal)):
            return str(raw)
        raise TypeError(f"cannot decode {type(raw).__name__} as string")

    def _load(self, stored: Any) -> str:
        if not isinstance(stored, str):
            raise TypeError(f"expected a JSON string, got {type(stored).__name__}")
        return stored


@dataclass(frozen=True)
class IntegerHandler(ValueHandler):
    """Fixed-width signed or unsigned integers."""

    bits: int = 64
    signed: bool = True

    @property
    def bounds(self) -> tuple[int, int]:
        if self.signed:
            return -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        return 0, (1 << self.bits) - 1

    def _zero(self) -> int:
        return 0

    def _decode(self, raw: Any) -> int:
        if isinstance(raw, bool):
            value = int(raw)
        elif isinstance(raw, int):
            value = raw
        elif isinstance(raw, (float, Decimal)):
            if not math.isfinite(raw) or raw != int(raw):
                raise ValueError(f"{raw!r} is not an integral value")
            value = int(raw)
        elif isinstance(raw, (bytes, bytearray, memoryview)):
            value = int(bytes(raw).decode("ascii"))
        elif isinstance(raw, str):
            value = int(raw)
        else:
            raise TypeError(f"cannot decode {type(raw).__name__} as integer")

        low, high = self.bounds
        if not low <= value <= high:
            raise ValueError(f"{value} out of range for {self.bits}-bit integer")
        return value

    def _load(self, stored: Any) -> int:
        if isinstance(stored, bool) or not isinstance(stored, int):
            raise TypeError(f"expected a JSON integer, got {stored!r}")
        return self._decode(stored)


@dataclass(frozen=True)
class FloatHandler(ValueHandler):
    """IEEE floats of single or double precision."""

    bits: int = 64

    def _zero(self) -> float:
        return 0.0

    def _decode(self, raw: Any) -> float:
        if isinstance(raw, bool):
            raise TypeError("cannot decode bool as float")
        if isinstance(raw, (int, float, Decimal)):
            value = float(raw)
        elif isinstance(raw, (bytes, bytearray, memoryview)):
            value = float(bytes(raw).decode("ascii"))
        elif isinstance(raw, str):
            value = float(raw)
        else:
            raise TypeError(f"cannot decode {type(raw).__name__} as float")

        if self.bits == 32:
            try:
                value = struct.unpack("<f", struct.pack("<f", value))[0]
            except OverflowError:
                raise ValueError(f"{value!r} out of range for float32") from None
        return value

    def equal(self, expect: Any, actual: Any) -> bool:
        if isinstance(expect, float) and isinstance(actual, float):
            if math.isnan(expect) and math.isnan(actual):
                return True
        return expect == actual


@dataclass(frozen=True)
class TimestampHandler(ValueHandler):
    """Date-times, stored as ISO 8601 text."""

    comparable: bool = False

    def _zero(self) -> datetime:
        return ZERO_TIME

    def _decode(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, date):
            return datetime(raw.year, raw.month, raw.day)
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = bytes(raw).decode("ascii")
        if isinstance(raw, str):
            return datetime.fromisoformat(raw)
        raise TypeError(f"cannot decode {type(raw).__name__} as timestamp")

    def _encode(self, value: datetime) -> str:
        return value.isoformat()

    def _load(self, stored: Any) -> datetime:
        if not isinstance(stored, str):
            raise TypeError(f"expected an ISO 8601 string, got {stored!r}")
        return datetime.fromisoformat(stored)


@dataclass(frozen=True)
class RawBytesHandler(ValueHandler):
    """Uninterpreted byte strings, stored as base64 text."""

    nullable: bool = True
    comparable: bool = False

    def zero(self) -> bytes:
        return b""

    def _decode(self, raw: Any) -> bytes:
        if isinstance(raw, (bytes, bytearray, memoryview)):
            return bytes(raw)
        if isinstance(raw, str):
            return raw.encode("utf-8")
        raise TypeError(f"cannot decode {type(raw).__name__} as raw bytes")

    def _encode(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    def load(self, stored: Any) -> Any:
        # NULL stays distinguishable from an empty byte string
        if stored is None:
            return None
        if not isinstance(stored, str):
            raise TypeError(f"expected a base64 string, got {stored!r}")
        try:
            return base64.b64decode(stored, validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 payload: {e}") from e


class ScanType(Enum):
    """
    The closed enumeration of canonical scan types.

    The member value is the tag written into snapshot documents.
    """

    STRING = "string"
    NULL_STRING = "null_string"

    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    NULL_INT64 = "null_int64"

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    NULL_FLOAT64 = "null_float64"

    TIMESTAMP = "timestamp"
    NULL_TIMESTAMP = "null_timestamp"

    RAW_BYTES = "raw_bytes"

    @property
    def tag(self) -> str:
        """The serialized spelling of this scan type."""
        return self.value

    @property
    def handler(self) -> ValueHandler:
        return _HANDLERS[self]

    @property
    def nullable(self) -> bool:
        return self.handler.nullable

    @property
    def comparable(self) -> bool:
        """False when comparing this type requires a registered comparator."""
        return self.handler.comparable

    @classmethod
    def from_tag(cls, tag: Any) -> "ScanType":
        """
        Resolve a serialized tag back to its scan type.

        Args:
            tag: The tag string read from a document

        Returns:
            The matching ScanType

        Raises:
            UnsupportedTypeError: If the tag is not in the enumeration
        """
        try:
            return cls(tag)
        except ValueError:
            raise UnsupportedTypeError(f"unsupported scan type: {tag!r}", tag=str(tag)) from None


_HANDLERS: dict[ScanType, ValueHandler] = {
    ScanType.STRING: StringHandler(),
    ScanType.NULL_STRING: StringHandler(nullable=True),
    ScanType.INT: IntegerHandler(bits=64),
    ScanType.INT8: IntegerHandler(bits=8),
    ScanType.INT16: IntegerHandler(bits=16),
    ScanType.INT32: IntegerHandler(bits=32),
    ScanType.INT64: IntegerHandler(bits=64),
    ScanType.UINT: IntegerHandler(bits=64, signed=False),
    ScanType.UINT8: IntegerHandler(bits=8, signed=False),
    ScanType.UINT16: IntegerHandler(bits=16, signed=False),
    ScanType.UINT32: IntegerHandler(bits=32, signed=False),
    ScanType.UINT64: IntegerHandler(bits=64, signed=False),
    ScanType.NULL_INT64: IntegerHandler(nullable=True, bits=64),
    ScanType.FLOAT32: FloatHandler(bits=32),
    ScanType.FLOAT64: FloatHandler(bits=64),
    ScanType.NULL_FLOAT64: FloatHandler(nullable=True, bits=64),
    ScanType.TIMESTAMP: TimestampHandler(),
    ScanType.NULL_TIMESTAMP: TimestampHandler(nullable=True),
    ScanType.RAW_BYTES: RawBytesHandler(),
}
