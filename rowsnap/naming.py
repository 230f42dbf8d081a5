"""
Snapshot and result naming rules.

Names become directory and file names under the snapshot root, so they are
restricted to word characters and dashes. Snapshot names are additionally
lower-cased so that recording and checking agree regardless of spelling.
"""

import re

from rowsnap.errors import InvalidNameError


NAME_PATTERN = re.compile(r"^[\w-]+$")
_UNSAFE = re.compile(r"[^\w.-]+")


def validate_name(name: str) -> str:
    """
    Check that a name can be used as a single path component.

    Raises:
        InvalidNameError: If the name is empty or has characters outside [\\w-]
    """
    if not isinstance(name, str) or not NAME_PATTERN.match(name):
        raise InvalidNameError(f"invalid name: {name!r}")
    return name


def clean_name(name: str) -> str:
    """Validate a snapshot name and return its canonical lower-case form."""
    return validate_name(name).lower()


def safe_test_dir(test_name: str) -> str:
    """
    Map a test identifier to one directory name.

    Test identifiers such as pytest node ids contain separators and brackets;
    every run of unsafe characters collapses to a single underscore.

    Example:
        >>> safe_test_dir("tests/test_orders.py::test_create[mysql]")
        'tests_test_orders.py_test_create_mysql_'
    """
    cleaned = _UNSAFE.sub("_", test_name)
    if not cleaned.strip("."):
        raise InvalidNameError(f"invalid test name: {test_name!r}")
    return cleaned

