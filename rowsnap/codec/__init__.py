"""
Codec module for rowsnap.

This module provides lossless serialization of Results to and from
self-describing JSON documents.
"""

from rowsnap.codec.document import (
    FORMAT_VERSION,
    col_type_from_dict,
    col_type_to_dict,
    dump_file,
    from_document,
    load_file,
    marshal,
    to_document,
    unmarshal,
)

__all__ = [
    "FORMAT_VERSION",
    "col_type_from_dict",
    "col_type_to_dict",
    "dump_file",
    "from_document",
    "load_file",
    "marshal",
    "to_document",
    "unmarshal",
]
