"""
Tests for the naming rules.

Tests validation of snapshot and result names and test directory mapping.
"""

import pytest

from rowsnap.errors import InvalidNameError
from rowsnap.naming import clean_name, safe_test_dir, validate_name


class TestValidateName:
    """Tests for name validation."""

    @pytest.mark.parametrize("name", ["initial", "after-checkout", "step_2", "Orders"])
    def test_valid(self, name):
        """Test that word characters and dashes are accepted."""
        assert validate_name(name) == name

    @pytest.mark.parametrize("name", ["", "a b", "../up", "a/b", "a.json"])
    def test_invalid(self, name):
        """Test that names unusable as a path component are rejected."""
        with pytest.raises(InvalidNameError):
            validate_name(name)

    def test_invalid_is_value_error(self):
        """Test that callers catching ValueError still see the failure."""
        with pytest.raises(ValueError):
            validate_name("no spaces")

    def test_clean_name_lowercases(self):
        """Test that snapshot names are lower-cased."""
        assert clean_name("After_Checkout") == "after_checkout"


class TestSafeTestDir:
    """Tests for mapping test identifiers to directories."""

    def test_pytest_node_id(self):
        """Test a parametrized pytest node id."""
        assert safe_test_dir("tests/test_orders.py::test_create[mysql]") == (
            "tests_test_orders.py_test_create_mysql_"
        )

    def test_plain_name_unchanged(self):
        """Test that a simple test name is used as is."""
        assert safe_test_dir("TestCheckout") == "TestCheckout"

    @pytest.mark.parametrize("name", ["", "..", "."])
    def test_unusable(self, name):
        """Test that names that cannot be a directory are rejected."""
        with pytest.raises(InvalidNameError):
            safe_test_dir(name)
