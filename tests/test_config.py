"""
Tests for tool settings.
"""

from pathlib import Path

import pytest

from rowsnap.config import Settings


class TestSettings:
    """Tests for resolving settings from the environment."""

    def test_defaults(self):
        """Test the defaults with an empty environment."""
        settings = Settings.from_env({})
        assert settings.snapshot_root == Path("testdata/snapshot")
        assert settings.batch_size == 1000

    def test_overrides(self):
        """Test environment overrides."""
        settings = Settings.from_env({
            "ROWSNAP_SNAPSHOT_ROOT": "/tmp/snaps",
            "ROWSNAP_BATCH_SIZE": "250",
        })
        assert settings.snapshot_root == Path("/tmp/snaps")
        assert settings.batch_size == 250

    def test_bad_batch_size(self):
        """Test that a non-positive batch size is rejected."""
        with pytest.raises(ValueError):
            Settings.from_env({"ROWSNAP_BATCH_SIZE": "0"})
